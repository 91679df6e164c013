"""Tests for credentials, errors, results and debug output."""

import httpx
import pytest

from portalauth.auth import (
    AuthResult,
    FixedSecret,
    FormNotFoundError,
    IdentifierNotFoundError,
    PictureSequence,
)
from portalauth.auth.credentials import describe_credential
from portalauth.auth.state import AuthenticationState
from portalauth.utils.debug import debug_submission, redact_fields, set_debug_enabled


class TestCredentials:
    """Credential variants."""

    def test_repr_hides_secrets(self):
        assert "hunter2" not in repr(FixedSecret("alice", "hunter2"))
        assert "sun" not in repr(PictureSequence("alice", ["sun", "car"]))

    def test_labels_become_tuple(self):
        credential = PictureSequence("alice", ["sun", "car"])
        assert credential.ordered_labels == ("sun", "car")

    def test_describe(self):
        assert describe_credential(FixedSecret("alice", "x")) == "standard"
        assert describe_credential(PictureSequence("alice", ["sun"])) == "pictogram"


class TestAuthError:
    """Error context."""

    def test_with_context_fills_blanks_only(self):
        error = FormNotFoundError("No form", last_url="https://idp.test/a")
        error.with_context(last_url="https://idp.test/b", step=4, last_check="continue_link")

        assert error.last_url == "https://idp.test/a"
        assert error.step == 4
        assert error.last_check == "continue_link"
        assert str(error) == "No form | url=https://idp.test/a | step=4 | check=continue_link"


class TestAuthenticationState:
    """State transitions."""

    def test_transitions_return_new_state(self):
        state = AuthenticationState("https://portal.test/Login", "<html/>")
        moved = state.advance("https://idp.test/login", "<form/>", credentials_submitted=True)

        assert state.current_url == "https://portal.test/Login"
        assert moved.credentials_submitted
        assert moved.next_step().step == 1
        assert moved.checked("form").last_check == "form"


class TestAuthResult:
    """Result lifecycle."""

    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self):
        client = httpx.AsyncClient()
        async with AuthResult(success=True, account_id="1", session=client) as result:
            assert not result.session.is_closed
        assert client.is_closed

    def test_summary(self):
        ok = AuthResult(success=True, account_id="42", steps=2, success_signal="api_access")
        assert ok.summary() == "authenticated (account=42, steps=2, signal=api_access)"

        failed = AuthResult(success=False, error=FormNotFoundError("No form", step=3))
        assert failed.summary().startswith("failed: No form")
        assert not failed.identifier_missing

    def test_identifier_missing(self):
        result = AuthResult(success=True, error=IdentifierNotFoundError("none"))
        assert result.identifier_missing


class TestDebugOutput:
    """Debug output never shows secrets."""

    def test_redact_fields(self):
        redacted = redact_fields({"username": "alice", "Password": "pw"}, {"password"})
        assert redacted == {"username": "alice", "Password": "***"}

    def test_submission_masks_secret(self, capsys):
        set_debug_enabled(True)
        debug_submission(
            "https://idp.test/login",
            {"username": "alice", "password": "hunter2"},
            {"password"},
            "fixed_secret",
        )
        err = capsys.readouterr().err
        assert "hunter2" not in err
        assert "***" in err
        assert "alice" in err

    def test_disabled_prints_nothing(self, capsys):
        debug_submission("https://idp.test/login", {"password": "hunter2"}, {"password"}, None)
        assert capsys.readouterr().err == ""
