"""Test configuration and fixtures for portalauth."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from portalauth.config import AuthSettings
from portalauth.utils.debug import set_debug_enabled

PORTAL = "https://portal.test"
IDP = "https://idp.test"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_home(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> Path:
    """Point ~ at a temp dir so the global config file is isolated."""
    monkeypatch.setattr(Path, "home", lambda: temp_dir)
    (temp_dir / ".portalauth").mkdir()
    return temp_dir


@pytest.fixture
def settings() -> AuthSettings:
    """Settings for a fake portal on portal.test behind an IdP on idp.test."""
    return AuthSettings(
        login_url=f"{PORTAL}/Login",
        success_url=f"{PORTAL}/Node/",
        target_domain="portal.test",
        api_base_url=PORTAL,
        identifier_page_url=f"{PORTAL}/node/minuge",
        timeout=5.0,
    )


@pytest.fixture
def provider_page() -> str:
    """Broker page choosing the identity provider through a hidden field."""
    return f"""
    <html><head><title>Vælg login</title></head><body>
    <form action="{IDP}/broker/choose" method="post">
        <input type="hidden" name="selectedIdp" value="" />
        <input type="hidden" name="RelayState" value="r1" />
    </form>
    </body></html>
    """


@pytest.fixture
def identity_page() -> str:
    """IdP page asking only for the username."""
    return f"""
    <html><head><title>Log ind</title></head><body>
    <form action="{IDP}/login" method="post">
        <input type="hidden" name="state" value="abc123" />
        <input type="text" name="username" />
        <button type="submit" name="action" value="next">Næste</button>
    </form>
    </body></html>
    """


@pytest.fixture
def password_page() -> str:
    """IdP page with a classic username/password form."""
    return f"""
    <html><head><title>Log ind</title></head><body>
    <form action="{IDP}/login" method="post">
        <input type="hidden" name="state" value="abc123" />
        <input type="text" name="username" />
        <input type="password" name="password" />
    </form>
    </body></html>
    """


def make_picture_page(pictures: dict[str, str], action: str = f"{IDP}/login/picture") -> str:
    """Picture-login page offering ``pictures`` (label -> code)."""
    icons = "\n".join(
        f'<div class="picture js-icon" data-passw="{code}" title="{label}"><img alt="{label}" /></div>'
        for label, code in pictures.items()
    )
    return f"""
    <html><head><title>Vælg billeder</title></head><body>
    <form action="{action}" method="post">
        <input type="hidden" name="username" value="alice" />
        <input type="hidden" name="password" value="" />
        <div class="slots js-set-passw"></div>
        {icons}
    </form>
    </body></html>
    """


@pytest.fixture
def picture_page() -> str:
    return make_picture_page({"Sun": "4", "Tree": "7", "Car": "2", "House": "9"})


@pytest.fixture(autouse=True)
def reset_debug() -> Generator[None, None, None]:
    """Keep debug output off between tests."""
    yield
    set_debug_enabled(False)
