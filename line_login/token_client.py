"""
Token endpoint client: exchange an authorization code for tokens (POST /token).
Single attempt with a timeout; the code is single use so failures are not retried.
"""
import logging
from dataclasses import dataclass

import httpx

from line_login.config import TOKEN_TIMEOUT_SECONDS, TOKEN_URL
from line_login.errors import TokenExchangeError

logger = logging.getLogger(__name__)


@dataclass
class TokenResponse:
    access_token: str
    expires_in: int
    id_token: str
    refresh_token: str
    scope: str
    token_type: str

    @classmethod
    def from_json(cls, data) -> "TokenResponse":
        """Validate a decoded token response. Raises TokenExchangeError on schema violation."""
        if not isinstance(data, dict):
            raise TokenExchangeError("Token response is not a JSON object")
        missing = [name for name in _FIELDS if name not in data]
        if missing:
            raise TokenExchangeError(f"Token response missing field(s): {', '.join(missing)}")
        for name, expected in _FIELDS.items():
            value = data[name]
            # bool is an int subclass; reject it for expires_in
            if not isinstance(value, expected) or isinstance(value, bool):
                raise TokenExchangeError(f"Token response field '{name}' has wrong type")
        return cls(**{name: data[name] for name in _FIELDS})


_FIELDS = {
    "access_token": str,
    "expires_in": int,
    "id_token": str,
    "refresh_token": str,
    "scope": str,
    "token_type": str,
}


def _provider_message(r: httpx.Response) -> str:
    """error_description / error from a JSON error body, else reason phrase or body text."""
    try:
        err = r.json()
    except ValueError:
        err = None
    if isinstance(err, dict):
        msg = err.get("error_description") or err.get("error")
        if msg:
            return str(msg)
    return r.reason_phrase or r.text or "Token exchange failed"


def exchange_code(
    code: str,
    *,
    redirect_uri: str,
    client_id: str,
    client_secret: str,
    token_url: str = TOKEN_URL,
    timeout: float = TOKEN_TIMEOUT_SECONDS,
) -> TokenResponse:
    """
    Exchange code for access_token, id_token, refresh_token.
    redirect_uri must be byte-identical to the one sent to /authorize.
    Raises TokenExchangeError on transport failure, non-2xx status or malformed body.
    """
    try:
        r = httpx.post(
            token_url,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": client_id,
                "client_secret": client_secret,
            },
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
    except httpx.TimeoutException as e:
        logger.warning("Token endpoint timed out after %ss: %s", timeout, e)
        raise TokenExchangeError("Token endpoint timed out") from e
    except httpx.HTTPError as e:
        logger.warning("Token endpoint request failed: %s", e)
        raise TokenExchangeError(f"Token endpoint request failed: {e}") from e

    if not r.is_success:
        message = _provider_message(r)
        logger.info("Token exchange rejected: status=%s message=%s", r.status_code, message)
        raise TokenExchangeError(f"LINE Login returns an error: {message}")

    try:
        data = r.json()
    except ValueError as e:
        raise TokenExchangeError("Token response is not valid JSON") from e
    return TokenResponse.from_json(data)
