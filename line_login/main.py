"""
LINE Login web client.
GET / shows a login link, GET /login redirects to LINE, GET /callback verifies the
login and returns the user's identity as JSON. Session is a signed cookie.
"""
import html
import logging

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from line_login.audit import (
    EVENT_CALLBACK_FAIL,
    EVENT_CALLBACK_OK,
    EVENT_LOGIN_STARTED,
    EVENT_PROVIDER_ERROR,
    get_client_ip,
    log_audit,
    OUTCOME_FAIL,
    OUTCOME_SUCCESS,
)
from line_login.authorize_request import start_login
from line_login.callback import CallbackParams, handle_callback
from line_login.config import (
    AUTHORIZE_URL,
    CLIENT_ID,
    CLIENT_SECRET,
    CONSUME_NONCE,
    DEFAULT_SCOPE,
    HTTPS_ONLY,
    ID_TOKEN_LEEWAY_SECONDS,
    ISSUER,
    REDIRECT_URI,
    SESSION_COOKIE,
    SESSION_SECRET,
    TOKEN_TIMEOUT_SECONDS,
    TOKEN_URL,
)
from line_login.errors import ProviderError
from line_login.session_context import MappingSession

logger = logging.getLogger(__name__)

app = FastAPI(title="LINE Login Client", version="0.1.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=SESSION_SECRET,
    session_cookie=SESSION_COOKIE,
    same_site="lax",
    https_only=HTTPS_ONLY,
)

if not CLIENT_ID or not CLIENT_SECRET:
    logger.warning(
        "LINE Login not configured. Set LINE_LOGIN_CLIENT_ID and LINE_LOGIN_CLIENT_SECRET environment variables."
    )


def redirect_uri_for(request: Request) -> str:
    """Callback URL sent to both /authorize and /token; must be identical in both."""
    if REDIRECT_URI:
        return REDIRECT_URI
    return str(request.url_for("callback"))


def _not_configured() -> HTMLResponse:
    return HTMLResponse(
        """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Error</title></head>
<body>
  <h1>Error</h1>
  <p>LINE Login is not configured.</p>
</body>
</html>""",
        status_code=503,
    )


def _begin(request: Request):
    """Start a login transaction for this browser session."""
    auth_request = start_login(
        MappingSession(request.session),
        client_id=CLIENT_ID,
        redirect_uri=redirect_uri_for(request),
        scope=DEFAULT_SCOPE,
        authorize_url=AUTHORIZE_URL,
    )
    log_audit(EVENT_LOGIN_STARTED, client_id=CLIENT_ID, ip=get_client_ip(request))
    return auth_request


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "line_login"}


@app.get("/", response_class=HTMLResponse)
def index(request: Request):
    """Login page; the link carries this session's state and a fresh nonce."""
    if not CLIENT_ID:
        return _not_configured()
    auth_request = _begin(request)
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>LINE Login</title></head>
<body>
  <h1>LINE Login</h1>
  <p><a href="{html.escape(auth_request.url)}">Login</a></p>
</body>
</html>"""
    )


@app.get("/login")
def login(request: Request):
    """Redirect straight to LINE /authorize."""
    if not CLIENT_ID:
        return _not_configured()
    auth_request = _begin(request)
    return RedirectResponse(url=auth_request.url, status_code=302)


@app.get("/callback")
def callback(request: Request):
    """
    Handle redirect from LINE. Validates state, exchanges code, verifies ID token.
    Returns {userId, userName, picture} or {error, errorDescription}.
    """
    params = CallbackParams.from_query(request.query_params)
    result = handle_callback(
        params,
        MappingSession(request.session),
        redirect_uri=redirect_uri_for(request),
        client_id=CLIENT_ID,
        client_secret=CLIENT_SECRET,
        token_url=TOKEN_URL,
        issuer=ISSUER,
        timeout=TOKEN_TIMEOUT_SECONDS,
        leeway=ID_TOKEN_LEEWAY_SECONDS,
        consume_nonce=CONSUME_NONCE,
    )
    ip = get_client_ip(request)
    if not result.ok:
        event = EVENT_PROVIDER_ERROR if isinstance(result.error, ProviderError) else EVENT_CALLBACK_FAIL
        log_audit(event, client_id=CLIENT_ID, ip=ip, outcome=OUTCOME_FAIL, error=result.error.error)
        return JSONResponse(result.to_json(), status_code=result.error.status_code)

    log_audit(
        EVENT_CALLBACK_OK,
        client_id=CLIENT_ID,
        user_id=result.identity.user_id,
        ip=ip,
        outcome=OUTCOME_SUCCESS,
    )
    return JSONResponse(result.to_json())


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        "line_login.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
