"""Identity data models."""

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Caller(BaseModel):
    """An authenticated caller.

    Only produced by an IdentityVerifier after the provider accepted the
    token. Stores scope reads and writes by this object, never by ids
    taken from request bodies.

    Attributes:
        user_id: Identity provider user id.
        email: Email address, when the provider returns one.
        access_token: The verified bearer token.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(description="Verified user id")
    email: str | None = Field(default=None, description="User email")
    access_token: SecretStr = Field(description="Verified bearer token")
