"""Tests for success detection."""

import httpx
import pytest
import respx
from httpx import Response

from portalauth.auth.form import parse_html
from portalauth.auth.transport import AttemptTransport
from portalauth.auth.verifier import (
    is_login_path,
    looks_like_json,
    page_success_reason,
    check_api_access,
    url_matches_success,
)
from portalauth.config import AuthSettings

CONTEXT_PAGE = "<html><script>var bruger = {};</script></html>"
PLAIN_PAGE = "<html><body>Velkommen</body></html>"


class TestUrlChecks:
    """URL-based checks."""

    def test_success_url_matches_any_scheme(self, settings: AuthSettings):
        assert url_matches_success("https://portal.test/Node/", settings)
        assert url_matches_success("http://portal.test/Node/week?w=3", settings)
        assert not url_matches_success("https://portal.test/Login", settings)

    def test_login_path(self, settings: AuthSettings):
        assert is_login_path("https://portal.test/KmdIdentity/Login?x=1", settings)
        assert not is_login_path("https://portal.test/Node/", settings)


class TestLooksLikeJson:
    """API response body classification."""

    def test_object_and_array(self):
        assert looks_like_json('{"id": 1}')
        assert looks_like_json("  [1, 2]")

    def test_html_and_broken(self):
        assert not looks_like_json("<html></html>")
        assert not looks_like_json('{"id": ')
        assert not looks_like_json("")


class TestPageSuccessReason:
    """Heuristic page checks."""

    def test_account_context_on_target(self, settings: AuthSettings):
        soup = parse_html(CONTEXT_PAGE)
        assert page_success_reason(soup, "https://portal.test/home", 1, settings) == "account_context"

    def test_off_target_never_succeeds(self, settings: AuthSettings):
        soup = parse_html(CONTEXT_PAGE)
        assert page_success_reason(soup, "https://idp.test/home", 9, settings) is None

    def test_landing_page_excluded(self, settings: AuthSettings):
        soup = parse_html(CONTEXT_PAGE)
        assert page_success_reason(soup, "https://portal.test/Forside", 9, settings) is None
        assert page_success_reason(soup, "https://portal.test/Login", 9, settings) is None

    def test_success_path_overrides_landing_marker(self, settings: AuthSettings):
        soup = parse_html(CONTEXT_PAGE)
        url = "https://portal.test/Node/Forside"
        assert page_success_reason(soup, url, 0, settings) == "account_context"

    def test_benefit_of_doubt_after_threshold(self, settings: AuthSettings):
        soup = parse_html(PLAIN_PAGE)
        url = "https://portal.test/Node/"
        assert page_success_reason(soup, url, 5, settings) is None
        assert page_success_reason(soup, url, 6, settings) == "benefit_of_doubt"

    def test_no_markers_early(self, settings: AuthSettings):
        soup = parse_html(PLAIN_PAGE)
        assert page_success_reason(soup, "https://portal.test/home", 1, settings) is None


class TestCheckApiAccess:
    """API probing."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_stops_at_first_json(self, settings: AuthSettings):
        first = respx.get(host="portal.test", path="/api/stamdata/elev/getElev").mock(
            return_value=Response(500, text="error")
        )
        second = respx.get(host="portal.test", path="/api/stamdata/getProfiles").mock(
            return_value=Response(200, json=[{"id": 1}])
        )

        async with httpx.AsyncClient() as client:
            assert await check_api_access(AttemptTransport(client), settings) is True

        assert first.called
        assert second.called
        assert "_" in second.calls.last.request.url.params

    @respx.mock
    @pytest.mark.asyncio
    async def test_all_endpoints_fail(self, settings: AuthSettings):
        for path in settings.api_check_paths:
            respx.get(host="portal.test", path=path).mock(
                return_value=Response(200, text="<html>login</html>")
            )

        async with httpx.AsyncClient() as client:
            assert await check_api_access(AttemptTransport(client), settings) is False
