"""
ID token verification. LINE signs ID tokens with HS256 keyed by the channel secret.
Checks signature, iss, aud, exp, then that the nonce claim was issued in this session.
"""
import logging
from dataclasses import dataclass, field

import jwt

from line_login.config import CONSUME_NONCE, ID_TOKEN_LEEWAY_SECONDS, ISSUER
from line_login.errors import NonceError, SignatureError
from line_login.session_context import SessionContext

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["iss", "sub", "aud", "exp"]


@dataclass
class IdTokenClaims:
    sub: str
    nonce: str
    name: str | None = None
    picture: str | None = None
    raw: dict = field(default_factory=dict)


def _decode(id_token: str, *, client_id: str, client_secret: str, issuer: str, leeway: int) -> dict:
    """Verify signature and standard claims. Raises SignatureError; never returns unverified claims."""
    try:
        header = jwt.get_unverified_header(id_token)
    except jwt.DecodeError as e:
        logger.debug("ID token malformed: %s", e)
        raise SignatureError("Malformed ID token") from e
    if header.get("alg") != ALGORITHM:
        raise SignatureError(f"Unexpected ID token algorithm: {header.get('alg')}")

    try:
        return jwt.decode(
            id_token,
            client_secret,
            algorithms=[ALGORITHM],
            audience=client_id,
            issuer=issuer,
            leeway=leeway,
            options={"require": REQUIRED_CLAIMS, "verify_exp": True, "verify_aud": True, "verify_iss": True},
        )
    except jwt.InvalidSignatureError as e:
        raise SignatureError("Invalid signature") from e
    except jwt.ExpiredSignatureError as e:
        raise SignatureError("ID token expired") from e
    except jwt.InvalidAudienceError as e:
        raise SignatureError("Invalid audience") from e
    except jwt.InvalidIssuerError as e:
        raise SignatureError("Invalid issuer") from e
    except jwt.MissingRequiredClaimError as e:
        raise SignatureError(f"ID token missing claim: {e.claim}") from e
    except jwt.InvalidTokenError as e:
        logger.debug("ID token verification failed: %s", e)
        raise SignatureError("ID token verification failed") from e


def check_nonce(claims: dict, session: SessionContext) -> str:
    """Return the nonce claim if it is pending in the session. Raises NonceError."""
    nonce = claims.get("nonce")
    if not isinstance(nonce, str) or not nonce:
        raise NonceError("ID token has no nonce")
    # Only the True marker counts; other session keys (e.g. "state") hold strings
    if session.get(nonce) is not True:
        raise NonceError("Illegal nonce")
    return nonce


def verify_id_token(
    id_token: str,
    session: SessionContext,
    *,
    client_id: str,
    client_secret: str,
    issuer: str = ISSUER,
    leeway: int = ID_TOKEN_LEEWAY_SECONDS,
    consume_nonce: bool = CONSUME_NONCE,
) -> IdTokenClaims:
    """
    Verify id_token under client_secret and check its nonce against the session.
    Raises SignatureError or NonceError; returns claims only when both checks pass.
    """
    if not client_secret:
        raise SignatureError("Channel secret not configured")
    claims = _decode(id_token, client_id=client_id, client_secret=client_secret, issuer=issuer, leeway=leeway)
    nonce = check_nonce(claims, session)
    if consume_nonce:
        session.set(nonce, False)
    return IdTokenClaims(
        sub=claims["sub"],
        nonce=nonce,
        name=claims.get("name"),
        picture=claims.get("picture"),
        raw=claims,
    )
