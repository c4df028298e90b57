"""
Admin authentication using a shared-secret Bearer token.

Guards the destructive reset endpoint. The token is compared against the
admin_token of the Settings the app was built with; nothing else about
identity is modelled.
"""

import secrets

from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

security = HTTPBearer()


def verify_admin_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> str:
    """
    Verify the bearer token matches the admin secret.

    Raises:
        HTTPException: If the secret is not configured or the token is invalid
    """
    admin_token = request.app.state.config.admin_token
    if admin_token is None:
        raise HTTPException(
            status_code=500,
            detail="Server misconfigured: ADMIN_TOKEN not set",
        )

    if not secrets.compare_digest(credentials.credentials, admin_token.get_secret_value()):
        raise HTTPException(
            status_code=401,
            detail="Invalid admin token",
        )

    return credentials.credentials
