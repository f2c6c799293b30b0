import logging
from typing import Optional, List, Dict, Any

from app.core.config import BoardConfig, get_config
from app.core.exceptions import BoardException
from app.core.result import Result
from app.services.api_clients.base_client import BaseApiClient
from app.utils import constants

logger = logging.getLogger(__name__)


class LineItemApiClient(BaseApiClient):
    """
    Client for the opportunity line item endpoints of the remote org.
    """

    async def get_line_items(self, opportunity_id: str) -> Result[List[Dict[str, Any]], BoardException]:
        """Fetches the raw line item records of one opportunity."""
        return await self._request(
            "GET", constants.LINE_ITEMS_ENDPOINT, params={"opportunityId": opportunity_id}
        )

    async def delete_line_item(self, line_item_id: str) -> Result[None, BoardException]:
        """Deletes one line item. The endpoint answers with an empty body."""
        result = await self._request("DELETE", f"{constants.LINE_ITEMS_ENDPOINT}/{line_item_id}")
        if result.is_failure():
            return result
        return Result.success(None)


def get_line_item_client(config: Optional[BoardConfig] = None) -> LineItemApiClient:
    """Factory function to get an instance of LineItemApiClient."""
    return LineItemApiClient(config=config or get_config())
