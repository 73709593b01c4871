"""
Shared plumbing for the hosted platform and email provider clients.
"""

from typing import Any, Dict, Optional

import httpx
import structlog

logger = structlog.get_logger(__name__)


class PlatformError(Exception):
    """Raised when an outbound call fails, times out or returns a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Any = None,
        timed_out: bool = False
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail
        self.timed_out = timed_out

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class BaseHTTPClient:
    """Base class holding one AsyncClient per service."""

    service_name = "platform"

    def __init__(
        self,
        base_url: str,
        headers: Dict[str, str],
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.client_config = {
            "base_url": base_url,
            "headers": headers,
            "timeout": httpx.Timeout(timeout),
        }
        if transport is not None:
            self.client_config["transport"] = transport
        self._client = httpx.AsyncClient(**self.client_config)
        self.logger = logger.bind(component=self.service_name)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Send a single request. Never retried: callers own the retry policy.

        Raises:
            PlatformError: On transport failure, timeout or non-2xx response
        """
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            self.logger.error("Request timed out", method=method, url=url)
            raise PlatformError(f"{self.service_name} request timed out", timed_out=True) from e
        except httpx.HTTPError as e:
            self.logger.error("Request failed", method=method, url=url, error=str(e))
            raise PlatformError(f"{self.service_name} request failed: {e}") from e

        if response.is_error:
            detail = _error_detail(response)
            self.logger.warning(
                "Request returned error status",
                method=method,
                url=url,
                status_code=response.status_code,
                detail=detail
            )
            raise PlatformError(
                _error_message(detail, self.service_name),
                status_code=response.status_code,
                detail=detail
            )
        return response


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(detail: Any, service_name: str) -> str:
    if isinstance(detail, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = detail.get(key)
            if isinstance(value, str) and value:
                return value
    return f"{service_name} returned an error"
