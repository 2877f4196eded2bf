"""
Callback handling: state check -> code exchange -> ID token verification -> identity.
Each stage raises its LoginError; handle_callback turns it into a CallbackResult so
the caller always gets either an identity or a typed error, never partial claims.
"""
import hmac
import logging
from dataclasses import dataclass

from line_login.authorize_request import STATE_KEY
from line_login.config import CONSUME_NONCE, ID_TOKEN_LEEWAY_SECONDS, ISSUER, TOKEN_TIMEOUT_SECONDS, TOKEN_URL
from line_login.errors import InvalidRequestError, LoginError, ProviderError, StateMismatchError
from line_login.id_token import verify_id_token
from line_login.session_context import SessionContext
from line_login.token_client import exchange_code

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallbackParams:
    code: str | None = None
    state: str | None = None
    friendship_status_changed: bool | None = None
    error: str | None = None
    error_description: str | None = None

    @classmethod
    def from_query(cls, query) -> "CallbackParams":
        """Build from a query mapping (e.g. request.query_params)."""
        fsc = query.get("friendship_status_changed")
        return cls(
            code=query.get("code") or None,
            state=query.get("state") or None,
            friendship_status_changed=None if fsc is None else fsc.strip().lower() == "true",
            error=query.get("error"),
            error_description=query.get("error_description"),
        )


@dataclass(frozen=True)
class LoginIdentity:
    user_id: str
    user_name: str | None
    picture: str | None

    def to_json(self) -> dict:
        return {"userId": self.user_id, "userName": self.user_name, "picture": self.picture}


@dataclass(frozen=True)
class CallbackResult:
    identity: LoginIdentity | None = None
    error: LoginError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_json(self) -> dict:
        return self.identity.to_json() if self.ok else self.error.to_json()


def check_state(session: SessionContext, returned_state: str | None) -> None:
    """Session must hold a state equal to the returned one. Raises StateMismatchError."""
    expected = session.get(STATE_KEY)
    if not isinstance(expected, str) or not returned_state:
        raise StateMismatchError("Invalid state")
    if not hmac.compare_digest(expected.encode("utf-8"), returned_state.encode("utf-8")):
        raise StateMismatchError("Invalid state")


def authenticate(
    params: CallbackParams,
    session: SessionContext,
    *,
    redirect_uri: str,
    client_id: str,
    client_secret: str,
    token_url: str = TOKEN_URL,
    issuer: str = ISSUER,
    timeout: float = TOKEN_TIMEOUT_SECONDS,
    leeway: int = ID_TOKEN_LEEWAY_SECONDS,
    consume_nonce: bool = CONSUME_NONCE,
) -> LoginIdentity:
    """Run the callback stages in order. Raises the first LoginError hit."""
    if params.error is not None:
        raise ProviderError(params.error, params.error_description)

    check_state(session, params.state)

    if not params.code:
        raise InvalidRequestError("Missing code parameter")

    if params.friendship_status_changed is not None:
        logger.info("friendship_status_changed=%s", params.friendship_status_changed)

    tokens = exchange_code(
        params.code,
        redirect_uri=redirect_uri,
        client_id=client_id,
        client_secret=client_secret,
        token_url=token_url,
        timeout=timeout,
    )
    claims = verify_id_token(
        tokens.id_token,
        session,
        client_id=client_id,
        client_secret=client_secret,
        issuer=issuer,
        leeway=leeway,
        consume_nonce=consume_nonce,
    )
    return LoginIdentity(user_id=claims.sub, user_name=claims.name, picture=claims.picture)


def handle_callback(
    params: CallbackParams,
    session: SessionContext,
    *,
    redirect_uri: str,
    client_id: str,
    client_secret: str,
    token_url: str = TOKEN_URL,
    issuer: str = ISSUER,
    timeout: float = TOKEN_TIMEOUT_SECONDS,
    leeway: int = ID_TOKEN_LEEWAY_SECONDS,
    consume_nonce: bool = CONSUME_NONCE,
) -> CallbackResult:
    """
    Callback boundary: runs authenticate() and returns the identity or the typed
    error instead of raising.
    """
    try:
        identity = authenticate(
            params,
            session,
            redirect_uri=redirect_uri,
            client_id=client_id,
            client_secret=client_secret,
            token_url=token_url,
            issuer=issuer,
            timeout=timeout,
            leeway=leeway,
            consume_nonce=consume_nonce,
        )
    except LoginError as e:
        logger.info("Login callback failed: %s (%s)", e.error, e.description)
        return CallbackResult(error=e)
    return CallbackResult(identity=identity)
