import logging
from typing import Optional, List

from app.core.config import BoardConfig
from app.core.exceptions import BoardException, ErrorSeverity, ValidationError
from app.core.result import Result
from app.models.line_item import LineItem
from app.services.api_clients.line_item_client import LineItemApiClient, get_line_item_client

logger = logging.getLogger(__name__)


class LineItemService:
    """
    Service layer over LineItemApiClient.
    Turns raw records into LineItem objects and keeps every failure inside a Result.
    """

    def __init__(self, config: BoardConfig, client: Optional[LineItemApiClient] = None):
        self.config = config
        self.client: Optional[LineItemApiClient] = client
        self._is_operational: bool = False

    async def async_init(self) -> None:
        if not self.config.is_api_configured():
            logger.warning("LineItemService: API token is not configured. Service will not be operational.")
            self._is_operational = False
            return

        if self.client is None:
            self.client = get_line_item_client(self.config)
        self._is_operational = True
        logger.info("LineItemService initialized successfully and is operational.")

    @property
    def is_operational(self) -> bool:
        return self._is_operational and self.client is not None

    def _ensure_client(self) -> Result[None, BoardException]:
        if self.is_operational:
            return Result.success(None)

        error_msg = "LineItemService is not operational. Initialize with async_init() and configure the API token."
        logger.warning(error_msg)
        return Result.failure(BoardException(
            error_msg,
            severity=ErrorSeverity.WARNING,
            details="Client not available or API token missing."
        ))

    async def fetch_line_items(self, opportunity_id: str) -> Result[List[LineItem], BoardException]:
        client_check = self._ensure_client()
        if client_check.is_failure():
            return client_check

        result = await self.client.get_line_items(opportunity_id)
        if result.is_failure():
            logger.error(f"Fetching line items for {opportunity_id} failed: {result.error.message}")
            return result

        records = result.value or []
        if not isinstance(records, list):
            return Result.failure(ValidationError("response", "expected a list of line items", type(records).__name__))

        try:
            items = [LineItem.from_record(record) for record in records]
        except ValidationError as e:
            logger.error(f"Malformed line item for opportunity {opportunity_id}: {e.message}")
            return Result.failure(e)

        logger.debug(f"Fetched {len(items)} line items for opportunity {opportunity_id}")
        return Result.success(items)

    async def delete_line_item(self, line_item_id: str) -> Result[None, BoardException]:
        client_check = self._ensure_client()
        if client_check.is_failure():
            return client_check

        result = await self.client.delete_line_item(line_item_id)
        if result.is_success():
            logger.info(f"Line item {line_item_id} deleted.")
        else:
            logger.error(f"Deleting line item {line_item_id} failed: {result.error.message}")
        return result

    async def close(self) -> None:
        """Closes the underlying API client session."""
        if self.client:
            await self.client.close()
            logger.info("LineItemService: Client session closed.")
        self._is_operational = False


async def create_line_item_service(config: BoardConfig) -> LineItemService:
    """Factory function to create and asynchronously initialize a LineItemService."""
    service = LineItemService(config)
    await service.async_init()
    return service
