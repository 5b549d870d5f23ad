import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from gymdesk import config

logger = logging.getLogger(__name__)

ADMIN_ROLES = ("admin", "superadmin")

security = HTTPBearer()


def verify_bearer_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Verify JWT Bearer token from Authorization header.

    Tokens are issued by the login service; this API only checks the
    signature, the token type and the expiry.

    Returns user context dict with: user_id, email, name, role_name
    """
    token = credentials.credentials

    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error_code": "TOKEN_EXPIRED",
                "message": "Your session has expired. Please log in again.",
            },
        )
    except jwt.InvalidTokenError as e:
        logger.error(f"Invalid token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error_code": "INVALID_TOKEN",
                "message": "Invalid token",
            },
        )

    # Check token type
    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error_code": "INVALID_TOKEN_TYPE",
                "message": "Invalid token",
            },
        )

    return {
        "user_id": payload.get("user_id"),
        "email": payload.get("email"),
        "name": payload.get("name"),
        "role_name": payload.get("role_name") or "member",
    }


def require_admin(auth: dict = Depends(verify_bearer_token)) -> dict:
    """
    Dependency for admin-only endpoints. Returns the auth context so the
    admin can be recorded as the actor of the operation.

    Usage:
        @router.post("/{membership_id}/approve")
        def approve(membership_id: int, admin: dict = Depends(require_admin)):
    """
    role_name = (auth.get("role_name") or "").lower()
    if role_name in ADMIN_ROLES:
        return auth

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "error_code": "PERMISSION_DENIED",
            "message": "Access denied. Admin only.",
        },
    )

