import asyncio
import json
import logging
from typing import Optional, Dict, Any

import aiohttp

from app.core.config import BoardConfig
from app.core.exceptions import BoardException, APIError, AuthenticationError, ErrorSeverity
from app.core.result import Result

logger = logging.getLogger(__name__)


def extract_error_message(response_text: str, default: str) -> str:
    """
    Pull the human-readable message out of an error body.
    The org answers either {"message": ...} or [{"message": ..., "errorCode": ...}].
    """
    if not response_text:
        return default
    try:
        payload = json.loads(response_text)
    except json.JSONDecodeError:
        return response_text[:500]

    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        payload = payload[0]
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error_description") or payload.get("error")
        if message:
            return str(message)
    return default


class BaseApiClient:
    """
    Shared aiohttp plumbing for the remote org APIs: session lifecycle,
    bearer headers and translation of HTTP failures into Result failures.
    """

    def __init__(self, config: BoardConfig):
        self.config = config
        self.base_url = self.config.api_base_url.rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=config.api_timeout)
        self.session: Optional[aiohttp.ClientSession] = None
        self._lock = asyncio.Lock()

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session is initialized."""
        async with self._lock:
            if self.session is None or self.session.closed:
                self.session = aiohttp.ClientSession(timeout=self.timeout)

    async def _close_session(self) -> None:
        async with self._lock:
            if self.session and not self.session.closed:
                await self.session.close()
            self.session = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._close_session()

    @property
    def is_operational(self) -> bool:
        return bool(self.config.api_token)

    def _get_headers(self) -> Dict[str, str]:
        if not self.config.api_token:
            raise AuthenticationError(
                "No API token configured.",
                details={"setting": "LINEITEMBOARD_API_TOKEN"}
            )
        return {
            "Authorization": f"Bearer {self.config.api_token}",
            "Accept": "application/json",
        }

    async def _request(
        self, method: str, endpoint: str, data: Optional[Dict] = None, params: Optional[Dict] = None
    ) -> Result[Any, BoardException]:
        """Makes an HTTP request and wraps the outcome in a Result."""
        await self._ensure_session()
        full_url = f"{self.base_url}{endpoint}"

        try:
            headers = self._get_headers()
            async with self.session.request(
                method, full_url, headers=headers, params=params, json=data
            ) as response:
                response_text = await response.text()

                if response.status == 401:
                    logger.error(f"Authentication rejected: {method} {full_url}")
                    return Result.failure(AuthenticationError(
                        extract_error_message(response_text, "Session expired or invalid."),
                        details={"url": full_url, "method": method},
                    ))

                if response.status >= 400:
                    logger.error(
                        f"API request failed: {method} {full_url} - Status: {response.status} - Response: {response_text[:200]}"
                    )
                    return Result.failure(APIError(
                        extract_error_message(response_text, f"API Error: {response.status}"),
                        status_code=response.status,
                        details={"url": full_url, "method": method, "response": response_text[:200]},
                    ))

                if not response_text:
                    return Result.success(None)

                try:
                    return Result.success(json.loads(response_text))
                except json.JSONDecodeError:
                    logger.error(f"Failed to decode JSON response: {method} {full_url}. Response: {response_text[:200]}")
                    return Result.failure(APIError(
                        "Failed to decode JSON response.",
                        status_code=response.status,
                        details={"url": full_url, "method": method},
                    ))

        except aiohttp.ClientError as e:
            logger.error(f"AIOHTTP client error: {method} {full_url} - Error: {e}")
            return Result.failure(APIError(f"Network or HTTP error: {e}", details={"url": full_url, "method": method}))
        except asyncio.TimeoutError:
            logger.error(f"Request timed out after {self.config.api_timeout}s: {method} {full_url}")
            return Result.failure(APIError("Request timeout", details={"url": full_url, "timeout": self.config.api_timeout}))
        except BoardException as e:
            logger.error(f"BoardException during request: {method} {full_url} - Error: {e.message}")
            return Result.failure(e)
        except Exception as e:
            logger.exception(f"Unexpected error during API request: {method} {full_url}")
            return Result.failure(BoardException(
                f"Unexpected error: {e}",
                severity=ErrorSeverity.CRITICAL,
                details={"url": full_url, "method": method, "error": str(e)},
            ))

    async def close(self) -> None:
        """Close the underlying aiohttp session."""
        await self._close_session()
