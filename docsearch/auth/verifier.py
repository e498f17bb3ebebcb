"""Identity verifier interface and HTTP implementation."""

from abc import ABC, abstractmethod

import httpx

from docsearch.auth.models import Caller
from docsearch.config import AuthSettings
from docsearch.exceptions import AuthenticationError, ErrorCode, UpstreamError
from docsearch.logging_config import get_logger

logger = get_logger(__name__)


def parse_bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization`` header value.

    Raises:
        AuthenticationError: If the header is absent or not a bearer credential.
    """
    if not authorization or not authorization.strip():
        raise AuthenticationError(
            "Missing authorization header",
            code=ErrorCode.AUTHENTICATION_REQUIRED,
        )

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Invalid authorization header")
    return token


class IdentityVerifier(ABC):
    """Resolves bearer tokens to callers."""

    async def close(self) -> None:
        """Release client resources."""

    @abstractmethod
    async def verify(self, token: str) -> Caller:
        """Verify a bearer token with the identity provider.

        Args:
            token: Raw bearer token.

        Returns:
            The authenticated caller.

        Raises:
            AuthenticationError: If the token is rejected.
            UpstreamError: If the provider cannot be reached.
        """
        ...


class HTTPIdentityVerifier(IdentityVerifier):
    """Verifies tokens against a GoTrue-style ``/user`` endpoint."""

    def __init__(
        self,
        settings: AuthSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            settings: Identity provider configuration.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def verify(self, token: str) -> Caller:
        client = await self._get_client()
        url = f"{self._settings.url.rstrip('/')}/user"
        headers = {"Authorization": f"Bearer {token}"}
        if self._settings.api_key is not None:
            headers["apikey"] = self._settings.api_key.get_secret_value()

        try:
            response = await client.get(url, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Identity provider request error: {e}", extra={"url": url})
            raise UpstreamError(
                f"Failed to reach identity provider: {e}",
                code=ErrorCode.IDENTITY_SERVICE_ERROR,
            ) from e

        if 400 <= response.status_code < 500:
            raise AuthenticationError(
                "Invalid authentication token",
                details={"status_code": response.status_code},
            )
        if response.status_code >= 300:
            logger.error(
                f"Identity provider returned {response.status_code}",
                extra={"url": url, "status": response.status_code},
            )
            raise UpstreamError(
                f"Identity provider error: {response.status_code}",
                code=ErrorCode.IDENTITY_SERVICE_ERROR,
                status_code=response.status_code,
            )

        try:
            data = response.json()
            user_id = data["id"]
            if not user_id:
                raise AuthenticationError("Invalid authentication token")
            return Caller(
                user_id=str(user_id),
                email=data.get("email"),
                access_token=token,
            )
        except (KeyError, TypeError, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            raise AuthenticationError("Invalid authentication token") from e
