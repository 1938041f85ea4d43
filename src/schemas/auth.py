"""Authentication schemas for JWT tokens and user context."""

from pydantic import BaseModel, ConfigDict, Field


class UserContext(BaseModel):
    """Authenticated user context extracted from JWT token.

    The storefront issues tokens for both customers and employees.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: int = Field(description="Customer or employee id (from the JWT id claim)")
    role: str | None = Field(default=None, description="'cliente' or 'funcionario'")
    email: str | None = Field(default=None, description="User's email address if available")

    @property
    def is_customer(self) -> bool:
        return self.role == "cliente"


class TokenPayload(BaseModel):
    """JWT token payload structure for storefront tokens."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Subject id")
    tipo: str | None = Field(default=None, description="Account type")
    email: str | None = Field(default=None, description="User's email address")
    exp: int = Field(description="Expiration timestamp (Unix epoch)")
    iat: int | None = Field(default=None, description="Issued at timestamp (Unix epoch)")

    def to_user_context(self) -> UserContext:
        return UserContext(user_id=self.id, role=self.tipo, email=self.email)
