"""Client for the GitHub code search API."""

import time
from typing import Any

import httpx
from pydantic import ValidationError

from multichat.core.errors import ErrorCategory, ProviderError
from multichat.observability.constants import LogEvents
from multichat.observability.logger import get_logger
from multichat.schemas.internal import CodeSearchItem, CodeSearchResult

logger = get_logger(__name__)

LABEL = "GitHub"
USER_AGENT = "Multi-Platform-AI-App"

# GitHub answers these with its own vocabulary; keep the wording users know
_STATUS_MESSAGES: dict[int, tuple[ErrorCategory, str]] = {
    401: (ErrorCategory.AUTHENTICATION, "GitHub Authentication Error: Invalid token"),
    403: (ErrorCategory.RATE_LIMIT, "GitHub Rate Limit: API rate limit exceeded"),
    422: (ErrorCategory.INVALID_REQUEST, "GitHub Search Error: Invalid search query"),
}


class GitHubSearchClient:
    """Client for ``GET /search/code``."""

    def __init__(self, api_url: str, token: str, timeout: float = 30.0):
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = httpx.Timeout(timeout)

    async def search_code(self, query: str, per_page: int = 5) -> CodeSearchResult:
        """
        Search public code for a free-text query, most recently indexed first.

        Raises:
            ProviderError: On non-2xx, malformed body, timeout or network failure
        """
        start_time = time.perf_counter()

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.api_url}/search/code",
                    params={
                        "q": query,
                        "sort": "indexed",
                        "order": "desc",
                        "per_page": per_page,
                    },
                    headers={
                        "Authorization": f"Bearer {self.token}",
                        "Accept": "application/vnd.github.v3+json",
                        "User-Agent": USER_AGENT,
                    },
                )
            except httpx.TimeoutException as e:
                raise ProviderError(LABEL, ErrorCategory.TIMEOUT) from e
            except httpx.RequestError as e:
                raise ProviderError(LABEL, ErrorCategory.NETWORK, detail=str(e)) from e

        if not response.is_success:
            logger.warning(
                LogEvents.UPSTREAM_REQUEST_FAILED,
                upstream=LABEL,
                status_code=response.status_code,
            )
            if response.status_code in _STATUS_MESSAGES:
                category, message = _STATUS_MESSAGES[response.status_code]
                raise ProviderError(LABEL, category, message, status_code=response.status_code)
            raise ProviderError(
                LABEL,
                ErrorCategory.UPSTREAM,
                f"GitHub API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                LABEL, ErrorCategory.PROTOCOL, detail="search response is not JSON"
            ) from e

        result = self._parse_result(data, int((time.perf_counter() - start_time) * 1000))
        logger.info(
            LogEvents.UPSTREAM_REQUEST_COMPLETED,
            upstream=LABEL,
            latency_ms=result.latency_ms,
            total_count=result.total_count,
            items=len(result.items),
        )
        return result

    @classmethod
    def _parse_result(cls, data: Any, latency_ms: int) -> CodeSearchResult:
        if not isinstance(data, dict):
            raise _malformed("search response is not an object")
        items = data.get("items") or []
        if not isinstance(items, list):
            raise _malformed("search items are not a list")

        try:
            return CodeSearchResult(
                total_count=data.get("total_count") or 0,
                items=[cls._parse_item(item) for item in items],
                latency_ms=latency_ms,
            )
        except ValidationError as e:
            raise _malformed(f"unexpected search result: {e.error_count()} invalid fields") from e

    @staticmethod
    def _parse_item(item: Any) -> CodeSearchItem:
        if not isinstance(item, dict):
            raise _malformed("search item is not an object")
        repository = item.get("repository") or {}
        if not isinstance(repository, dict):
            raise _malformed("search item repository is not an object")
        return CodeSearchItem(
            name=item.get("name", ""),
            path=item.get("path", ""),
            repository=repository.get("full_name", ""),
            language=repository.get("language"),
        )


def _malformed(detail: str) -> ProviderError:
    return ProviderError(LABEL, ErrorCategory.PROTOCOL, detail=detail)
