"""Tests for login initiation: state reuse, fresh nonce, authorize URL."""
import re
from urllib.parse import parse_qs, urlparse

from line_login.authorize_request import (
    NONCE_ORDER_KEY,
    STATE_KEY,
    SessionWrite,
    apply_writes,
    build_authorize_url,
    generate_nonce,
    generate_state,
    issue_nonce,
    resolve_state,
    start_login,
)
from line_login.config import MAX_PENDING_NONCES
from line_login.session_context import MappingSession

REDIRECT = "https://client.example/callback"


def _query(url: str) -> dict:
    return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}


def test_generate_state_and_nonce_are_urlsafe():
    for value in (generate_state(), generate_nonce()):
        assert len(value) >= 32
        assert re.match(r"^[A-Za-z0-9_-]+$", value)


def test_resolve_state_creates_when_absent():
    session = MappingSession()
    state, writes = resolve_state(session)
    assert writes == [SessionWrite(STATE_KEY, state)]
    # resolve_state itself does not mutate
    assert session.get(STATE_KEY) is None


def test_resolve_state_reuses_existing():
    session = MappingSession({STATE_KEY: "existing"})
    state, writes = resolve_state(session)
    assert state == "existing"
    assert writes == []


def test_issue_nonce_marks_pending():
    nonce, writes = issue_nonce(MappingSession())
    assert writes == [SessionWrite(nonce, True), SessionWrite(NONCE_ORDER_KEY, nonce)]


def test_issue_nonce_drops_oldest_beyond_limit():
    data = {}
    session = MappingSession(data)
    issued = []
    for _ in range(5):
        nonce, writes = issue_nonce(session, max_pending=3)
        apply_writes(session, writes)
        issued.append(nonce)

    assert data[NONCE_ORDER_KEY].split() == issued[-3:]
    for nonce in issued[:2]:
        assert nonce not in data
    for nonce in issued[-3:]:
        assert data[nonce] is True


def test_start_login_many_times_keeps_session_bounded():
    data = {}
    session = MappingSession(data)
    for _ in range(100):
        last = start_login(session, client_id="1234", redirect_uri=REDIRECT)
    pending = [key for key, value in data.items() if value is True]
    assert len(pending) == MAX_PENDING_NONCES
    assert data[last.nonce] is True
    assert data[STATE_KEY] == last.state


def test_apply_writes():
    data = {"gone": True}
    apply_writes(MappingSession(data), [SessionWrite("a", "x"), SessionWrite("b", True), SessionWrite("gone", None)])
    assert data == {"a": "x", "b": True}


def test_build_authorize_url_includes_required_params():
    url = build_authorize_url(
        authorize_url="https://access.line.me/oauth2/v2.1/authorize",
        client_id="1234",
        redirect_uri=REDIRECT,
        scope="openid profile",
        state="mystate",
        nonce="mynonce",
    )
    assert url.startswith("https://access.line.me/oauth2/v2.1/authorize?")
    assert "scope=openid+profile" in url
    assert _query(url) == {
        "response_type": "code",
        "client_id": "1234",
        "redirect_uri": REDIRECT,
        "state": "mystate",
        "scope": "openid profile",
        "nonce": "mynonce",
    }


def test_start_login_twice_same_state_different_nonce():
    data = {}
    session = MappingSession(data)
    first = start_login(session, client_id="1234", redirect_uri=REDIRECT)
    second = start_login(session, client_id="1234", redirect_uri=REDIRECT)

    assert first.state == second.state
    assert first.nonce != second.nonce
    assert _query(first.url)["state"] == _query(second.url)["state"] == first.state
    assert _query(first.url)["nonce"] == first.nonce
    assert _query(second.url)["nonce"] == second.nonce
    # both nonces stay pending
    assert data[STATE_KEY] == first.state
    assert data[first.nonce] is True
    assert data[second.nonce] is True


def test_start_login_keeps_state_already_in_session():
    session = MappingSession({STATE_KEY: "in-flight"})
    auth_request = start_login(session, client_id="1234", redirect_uri=REDIRECT)
    assert auth_request.state == "in-flight"
    assert auth_request.redirect_uri == REDIRECT
