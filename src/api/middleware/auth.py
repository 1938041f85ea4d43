"""JWT verification for storefront-issued tokens."""

from enum import Enum
from typing import Any

import jwt

from src.core.config import get_settings
from src.schemas.auth import TokenPayload


class AuthErrorCode(str, Enum):
    """Authentication error codes."""

    UNAUTHORIZED = "UNAUTHORIZED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


class AuthError(Exception):
    """Authentication error with specific error code."""

    def __init__(self, message: str, code: AuthErrorCode) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


def decode_jwt(token: str) -> TokenPayload:
    """Decode and validate an HS256 token signed with the shared secret.

    Args:
        token: The JWT token string to decode.

    Returns:
        TokenPayload: Validated token payload.

    Raises:
        AuthError: If token is invalid, expired, or has wrong signature.
    """
    secret = get_settings().jwt_secret
    if not secret:
        raise AuthError("JWT secret not configured", AuthErrorCode.UNAUTHORIZED)

    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            options={"require": ["exp", "id"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Token has expired", AuthErrorCode.TOKEN_EXPIRED) from e
    except jwt.InvalidSignatureError as e:
        raise AuthError("Invalid token signature", AuthErrorCode.INVALID_SIGNATURE) from e
    except jwt.MissingRequiredClaimError as e:
        raise AuthError(f"Token missing required claim: {e}", AuthErrorCode.INVALID_TOKEN) from e
    except jwt.InvalidTokenError as e:
        raise AuthError(f"Invalid token: {e}", AuthErrorCode.INVALID_TOKEN) from e

    try:
        return TokenPayload.model_validate(payload)
    except ValueError as e:
        raise AuthError(f"Invalid token claims: {e}", AuthErrorCode.INVALID_TOKEN) from e
