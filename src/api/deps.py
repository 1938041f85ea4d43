"""FastAPI dependency injection functions."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from src.api.middleware.auth import AuthError, AuthErrorCode, decode_jwt
from src.schemas.auth import UserContext
from src.services.fulfillment_service import FulfillmentService
from src.services.order_service import OrderService


def get_fulfillment_service() -> FulfillmentService:
    """Provide a fulfillment service bound to the application's pool."""
    return FulfillmentService()


def get_order_service() -> OrderService:
    return OrderService()


async def get_current_user(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> UserContext:
    """Extract and validate the current user from the Authorization header.

    Args:
        authorization: The Authorization header value (Bearer token).

    Returns:
        UserContext: The authenticated user's context.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_jwt(parts[1]).to_user_context()
    except AuthError as e:
        detail = "Token has expired" if e.code == AuthErrorCode.TOKEN_EXPIRED else e.message
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


CurrentUser = Annotated[UserContext, Depends(get_current_user)]
FulfillmentServiceDep = Annotated[FulfillmentService, Depends(get_fulfillment_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
