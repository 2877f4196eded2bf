"""
Failure kinds of the login transaction. Each carries a short error code and a
description, rendered to the caller as {"error", "errorDescription"}.
"""


class LoginError(Exception):
    """Base for every failure surfaced by the callback."""

    error = "login_failed"
    status_code = 400

    def __init__(self, description: str, *, error: str | None = None):
        super().__init__(description)
        self.description = description
        if error is not None:
            self.error = error

    def to_json(self) -> dict:
        return {"error": self.error, "errorDescription": self.description}


class ProviderError(LoginError):
    """The provider redirected back with error/error_description; passed through verbatim."""

    def __init__(self, error: str, description: str | None = None):
        super().__init__(description, error=error)


class StateMismatchError(LoginError):
    error = "invalid_state"


class InvalidRequestError(LoginError):
    error = "invalid_request"


class TokenExchangeError(LoginError):
    error = "token_exchange_failed"
    status_code = 502


class SignatureError(LoginError):
    """ID token could not be verified (signature, algorithm, iss, aud or exp)."""

    error = "invalid_id_token"
    status_code = 401


class NonceError(LoginError):
    """nonce claim was never issued in this session: replayed or forged token."""

    error = "invalid_nonce"
    status_code = 401
