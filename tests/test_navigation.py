"""Tests for continue links, form submission and page diagnostics."""

import logging
from urllib.parse import parse_qs

import httpx
import pytest
import respx
from httpx import Response

from portalauth.auth.diagnostics import error_messages, log_dead_end, page_title
from portalauth.auth.form import FormDescriptor, parse_html
from portalauth.auth.navigator import find_continue_link
from portalauth.auth.submitter import build_payload, submit_form
from portalauth.auth.transport import AttemptTransport

MARKER = "unilogin-idp-prod"


class TestFindContinueLink:
    """Test find_continue_link."""

    def test_relative_link_resolved(self):
        soup = parse_html(f'<a href="/other">x</a><a href="/sso?hint={MARKER}">UniLogin</a>')
        link = find_continue_link(soup, "https://portal.test/Login", MARKER)
        assert link == f"https://portal.test/sso?hint={MARKER}"

    def test_no_matching_link(self):
        soup = parse_html('<a href="/help">Hjælp</a><a>no href</a>')
        assert find_continue_link(soup, "https://portal.test/", MARKER) is None

    def test_blank_marker_disables_links(self):
        soup = parse_html('<a href="/anything">x</a>')
        assert find_continue_link(soup, "https://portal.test/", "") is None


class TestBuildPayload:
    """Test build_payload."""

    def test_overrides_win_and_hidden_fields_kept(self):
        form = FormDescriptor("https://idp.test/login", {"state": "abc", "username": "", "password": ""})
        payload = build_payload(form, {"username": "alice", "password": "pw"})
        assert payload == {"state": "abc", "username": "alice", "password": "pw"}

    def test_presets_only_replace_existing_fields(self):
        form = FormDescriptor("https://idp.test/choose", {"selectedIdp": "", "RelayState": "r"})
        payload = build_payload(form, {}, {"selectedIdp": "uni_idp", "other": "x"})
        assert payload == {"selectedIdp": "uni_idp", "RelayState": "r"}

    def test_empty_form_submits_presets(self):
        form = FormDescriptor("https://idp.test/choose")
        assert build_payload(form, {}, {"selectedIdp": "uni_idp"}) == {"selectedIdp": "uni_idp"}

    def test_descriptor_not_mutated(self):
        form = FormDescriptor("https://idp.test/login", {"username": ""})
        build_payload(form, {"username": "alice"})
        assert form.fields == {"username": ""}


class TestSubmitForm:
    """Test submit_form."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_posts_and_follows_redirect(self):
        route = respx.post("https://idp.test/login").mock(
            return_value=Response(302, headers={"Location": "https://portal.test/Node/"})
        )
        respx.get("https://portal.test/Node/").mock(return_value=Response(200, text="home"))
        form = FormDescriptor("https://idp.test/login", {"state": "abc", "username": ""})

        async with httpx.AsyncClient(follow_redirects=True) as client:
            response = await submit_form(AttemptTransport(client), form, {"username": "alice"})

        assert response.url == "https://portal.test/Node/"
        assert response.body == "home"
        sent = parse_qs(route.calls.last.request.content.decode())
        assert sent == {"state": ["abc"], "username": ["alice"]}


class TestDiagnostics:
    """Page diagnostics."""

    def test_title_and_errors(self):
        soup = parse_html(
            '<title> Log ind </title><p class="error-text">Forkert kode</p><div class="alert"></div>'
        )
        assert page_title(soup) == "Log ind"
        assert error_messages(soup) == ["Forkert kode"]

    def test_dead_end_logs_warning(self, caplog):
        soup = parse_html('<div class="alert alert-danger">Prøv igen</div>')
        with caplog.at_level(logging.WARNING):
            messages = log_dead_end(soup)
        assert messages == ["Prøv igen"]
        assert "Dead end" in caplog.text
