"""
Audit logging. Security-relevant login events only; no tokens, codes, secrets,
state or nonce values. Records go to the "line_login.audit" logger.
"""
import logging

from fastapi import Request

EVENT_LOGIN_STARTED = "login_started"
EVENT_CALLBACK_OK = "callback_ok"
EVENT_CALLBACK_FAIL = "callback_fail"
EVENT_PROVIDER_ERROR = "provider_error"

OUTCOME_SUCCESS = "success"
OUTCOME_FAIL = "fail"

audit_logger = logging.getLogger("line_login.audit")


def get_client_ip(request: Request | None) -> str | None:
    """Client IP if available (e.g. request.client.host). No forwarding headers."""
    if request is None or request.client is None:
        return None
    return getattr(request.client, "host", None)


def log_audit(
    event_type: str,
    *,
    client_id: str | None = None,
    user_id: str | None = None,
    ip: str | None = None,
    outcome: str = OUTCOME_SUCCESS,
    error: str | None = None,
) -> None:
    """Emit one audit record. Never pass tokens or secrets."""
    audit_logger.info(
        "event=%s outcome=%s client_id=%s user_id=%s ip=%s error=%s",
        event_type,
        outcome,
        client_id,
        user_id,
        ip,
        error,
        extra={
            "event_type": event_type,
            "outcome": outcome,
            "client_id": client_id,
            "user_id": user_id,
            "ip": ip,
            "error": error,
        },
    )
