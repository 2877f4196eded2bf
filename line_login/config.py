"""
LINE Login client configuration. Channel credentials come from env, never from code.
The channel secret doubles as the HS256 key for ID token verification.
"""
import os
import secrets

# Channel (client) credentials from the LINE Developers console
CLIENT_ID = os.environ.get("LINE_LOGIN_CLIENT_ID", "")
CLIENT_SECRET = os.environ.get("LINE_LOGIN_CLIENT_SECRET", "")

# Provider endpoints (LINE Login v2.1)
AUTHORIZE_URL = os.environ.get("LINE_LOGIN_AUTHORIZE_URL", "https://access.line.me/oauth2/v2.1/authorize")
TOKEN_URL = os.environ.get("LINE_LOGIN_TOKEN_URL", "https://api.line.me/oauth2/v2.1/token")

# Expected iss claim of ID tokens
ISSUER = os.environ.get("LINE_LOGIN_ISSUER", "https://access.line.me").rstrip("/")

# openid is required for an ID token; profile adds name and picture claims
DEFAULT_SCOPE = os.environ.get("LINE_LOGIN_SCOPE", "openid profile")

# Callback URL registered with the channel. Empty: derived from the request as <base>/callback
REDIRECT_URI = os.environ.get("LINE_LOGIN_REDIRECT_URI", "").strip() or None

# Token endpoint timeout (seconds). Codes are single use, so there is no retry.
TOKEN_TIMEOUT_SECONDS = float(os.environ.get("LINE_LOGIN_TOKEN_TIMEOUT", "10"))

# Clock skew allowed when checking exp/iat of the ID token (seconds)
ID_TOKEN_LEEWAY_SECONDS = int(os.environ.get("LINE_LOGIN_ID_TOKEN_LEEWAY", "60"))

# Mark a nonce as used after a successful callback. Off keeps the nonce valid for the whole session.
CONSUME_NONCE = os.environ.get("LINE_LOGIN_CONSUME_NONCE", "false").strip().lower() in ("1", "true", "yes")

# Signing key for the session cookie. Unset: random per process (sessions do not survive restarts).
SESSION_SECRET = os.environ.get("LINE_LOGIN_SESSION_SECRET", "").strip() or secrets.token_urlsafe(32)
SESSION_COOKIE = "line_login_session"
HTTPS_ONLY = os.environ.get("LINE_LOGIN_HTTPS_ONLY", "false").strip().lower() in ("1", "true", "yes")

# Pending nonces kept per session (the session is a ~4 KB cookie); older ones are dropped
MAX_PENDING_NONCES = int(os.environ.get("LINE_LOGIN_MAX_PENDING_NONCES", "10"))
