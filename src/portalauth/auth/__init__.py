"""HTTP-only login engine for form-driven identity provider portals."""

from .credentials import Credential, FixedSecret, PictureSequence
from .driver import AuthenticationDriver
from .errors import (
    ActionMissingError,
    AttemptCancelledError,
    AuthError,
    AuthErrorKind,
    FormNotFoundError,
    IdentifierNotFoundError,
    MappingIncompleteError,
    NetworkError,
    StepsExhaustedError,
)
from .form import FieldKind, FormDescriptor, extract_form
from .result import AuthResult
from .service import authenticate, authenticate_account, authenticate_many

__all__ = [
    "ActionMissingError",
    "AttemptCancelledError",
    "AuthError",
    "AuthErrorKind",
    "AuthResult",
    "AuthenticationDriver",
    "Credential",
    "FieldKind",
    "FixedSecret",
    "FormDescriptor",
    "FormNotFoundError",
    "IdentifierNotFoundError",
    "MappingIncompleteError",
    "NetworkError",
    "PictureSequence",
    "StepsExhaustedError",
    "authenticate",
    "authenticate_account",
    "authenticate_many",
    "extract_form",
]
