"""Form submission."""

from __future__ import annotations

import logging

from ..utils.debug import debug_submission
from .form import FormDescriptor
from .transport import AttemptTransport, PageResponse

logger = logging.getLogger(__name__)


def build_payload(
    descriptor: FormDescriptor,
    overrides: dict[str, str],
    preset_fields: dict[str, str] | None = None,
) -> dict[str, str]:
    """POST body: every extracted field, preset values, then strategy overrides.

    Hidden fields are always kept. A form without any fields submits the
    preset values alone.
    """
    preset_fields = preset_fields or {}
    if descriptor.fields:
        presets = {name: value for name, value in preset_fields.items() if name in descriptor.fields}
    else:
        presets = dict(preset_fields)
    final = descriptor.with_overrides(presets).with_overrides(overrides)
    return dict(final.fields)


async def submit_form(
    transport: AttemptTransport,
    descriptor: FormDescriptor,
    overrides: dict[str, str],
    preset_fields: dict[str, str] | None = None,
    *,
    secret_names: set[str] | None = None,
    strategy: str | None = None,
) -> PageResponse:
    """POST the form and return the page the redirects end on."""
    payload = build_payload(descriptor, overrides, preset_fields)
    logger.debug("Submitting form to: %s", descriptor.action_url)
    logger.debug("Form data fields: %s", ", ".join(payload))
    debug_submission(descriptor.action_url, payload, secret_names or set(), strategy)

    response = await transport.post(descriptor.action_url, data=payload)

    logger.debug("Response status: %s", response.status_code)
    logger.debug("New URL: %s", response.url)
    return response
