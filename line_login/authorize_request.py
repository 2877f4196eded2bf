"""
Login initiation: state and nonce derivation and the LINE /authorize URL.
state is stable for the session (duplicate logins don't break an in-flight flow);
nonce is fresh per request and recorded in the session as pending.
"""
import secrets
from dataclasses import dataclass
from urllib.parse import urlencode

from line_login.config import AUTHORIZE_URL, DEFAULT_SCOPE, MAX_PENDING_NONCES
from line_login.session_context import SessionContext, SessionValue

STATE_KEY = "state"
# Space-separated pending nonces, oldest first
NONCE_ORDER_KEY = "nonces"


@dataclass(frozen=True)
class SessionWrite:
    key: str
    value: SessionValue | None


@dataclass(frozen=True)
class AuthorizationRequest:
    state: str
    nonce: str
    redirect_uri: str
    url: str


def generate_state() -> str:
    """Opaque value for CSRF protection; returned in callback."""
    return secrets.token_urlsafe(32)


def generate_nonce() -> str:
    """Random value bound into the ID token; checked on callback."""
    return secrets.token_urlsafe(32)


def resolve_state(session: SessionContext) -> tuple[str, list[SessionWrite]]:
    """Reuse the session's state if present, else a new one plus the write that stores it."""
    current = session.get(STATE_KEY)
    if isinstance(current, str) and current:
        return current, []
    state = generate_state()
    return state, [SessionWrite(STATE_KEY, state)]


def issue_nonce(session: SessionContext, max_pending: int = MAX_PENDING_NONCES) -> tuple[str, list[SessionWrite]]:
    """
    New nonce plus the writes marking it pending (keyed by the nonce itself).
    At most max_pending nonces stay pending; the oldest ones are dropped.
    """
    nonce = generate_nonce()
    current = session.get(NONCE_ORDER_KEY)
    order = current.split() if isinstance(current, str) else []
    order.append(nonce)
    evicted = order[:-max(1, max_pending)]
    order = order[len(evicted):]
    writes = [SessionWrite(old, None) for old in evicted]
    writes.append(SessionWrite(nonce, True))
    writes.append(SessionWrite(NONCE_ORDER_KEY, " ".join(order)))
    return nonce, writes


def apply_writes(session: SessionContext, writes: list[SessionWrite]) -> None:
    """Apply writes in order; a None value deletes the key."""
    for write in writes:
        if write.value is None:
            session.delete(write.key)
        else:
            session.set(write.key, write.value)


def build_authorize_url(
    *,
    authorize_url: str,
    client_id: str,
    redirect_uri: str,
    scope: str,
    state: str,
    nonce: str,
) -> str:
    """Build provider /authorize URL with required params."""
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "state": state,
        "scope": scope,
        "nonce": nonce,
    }
    return f"{authorize_url}?{urlencode(params)}"


def start_login(
    session: SessionContext,
    *,
    client_id: str,
    redirect_uri: str,
    scope: str = DEFAULT_SCOPE,
    authorize_url: str = AUTHORIZE_URL,
) -> AuthorizationRequest:
    """
    Derive state and nonce, record them in the session, and build the authorization URL.
    No network I/O.
    """
    state, state_writes = resolve_state(session)
    nonce, nonce_writes = issue_nonce(session)
    apply_writes(session, state_writes + nonce_writes)
    url = build_authorize_url(
        authorize_url=authorize_url,
        client_id=client_id,
        redirect_uri=redirect_uri,
        scope=scope,
        state=state,
        nonce=nonce,
    )
    return AuthorizationRequest(state=state, nonce=nonce, redirect_uri=redirect_uri, url=url)
