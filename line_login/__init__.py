"""LINE Login (OAuth2 authorization code + OpenID Connect) web client."""
