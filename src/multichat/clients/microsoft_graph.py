"""Client for Microsoft Graph using the client-credentials flow."""

import httpx

from multichat.core.errors import ErrorCategory, ProviderError
from multichat.observability.constants import LogEvents
from multichat.observability.logger import get_logger
from multichat.observability.sanitizer import sanitize_body

logger = get_logger(__name__)

LABEL = "Microsoft Graph"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"


class MicrosoftGraphClient:
    """Acquires an app-only token for a tenant and calls Graph with it."""

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        login_url: str = "https://login.microsoftonline.com",
        graph_url: str = "https://graph.microsoft.com",
        timeout: float = 30.0,
    ):
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.login_url = login_url.rstrip("/")
        self.graph_url = graph_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout)

    async def acquire_token(self) -> str:
        """Exchange the client credentials for a Graph access token."""
        token_url = f"{self.login_url}/{self.tenant_id}/oauth2/v2.0/token"
        response = await self._send(
            "POST",
            token_url,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "scope": GRAPH_SCOPE,
                "grant_type": "client_credentials",
            },
        )
        if not response.is_success:
            logger.warning(
                LogEvents.UPSTREAM_REQUEST_FAILED,
                upstream=LABEL,
                step="token",
                status_code=response.status_code,
                body=sanitize_body(response.text),
            )
            raise ProviderError(
                LABEL,
                ErrorCategory.AUTHENTICATION,
                "Failed to get Microsoft Graph access token",
                status_code=response.status_code,
            )

        try:
            access_token = response.json().get("access_token")
        except (ValueError, AttributeError) as e:
            raise ProviderError(
                LABEL, ErrorCategory.PROTOCOL, detail="token response is not a JSON object"
            ) from e
        if not access_token:
            raise ProviderError(
                LABEL, ErrorCategory.PROTOCOL, detail="token response has no access_token"
            )
        return access_token

    async def probe(self, access_token: str, path: str) -> None:
        """Call a Graph endpoint to confirm the token is usable."""
        response = await self._send(
            "GET",
            f"{self.graph_url}{path}",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if not response.is_success:
            logger.warning(
                LogEvents.UPSTREAM_REQUEST_FAILED,
                upstream=LABEL,
                step="probe",
                path=path,
                status_code=response.status_code,
            )
            raise ProviderError(
                LABEL,
                ErrorCategory.UPSTREAM,
                "Microsoft Graph API call failed",
                status_code=response.status_code,
            )

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                return await client.request(method, url, **kwargs)
            except httpx.TimeoutException as e:
                raise ProviderError(LABEL, ErrorCategory.TIMEOUT) from e
            except httpx.RequestError as e:
                raise ProviderError(LABEL, ErrorCategory.NETWORK, detail=str(e)) from e
