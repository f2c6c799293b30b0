import logging
from typing import Optional, Dict, Any

from app.core.config import BoardConfig, get_config
from app.core.exceptions import BoardException
from app.core.result import Result
from app.services.api_clients.base_client import BaseApiClient
from app.utils import constants

logger = logging.getLogger(__name__)


class UserProfileApiClient(BaseApiClient):
    """Client for the user record lookup used to resolve the current profile."""

    async def get_user(self, user_id: str) -> Result[Dict[str, Any], BoardException]:
        endpoint = f"{constants.USER_RECORD_ENDPOINT}/{user_id}"
        return await self._request("GET", endpoint, params={"fields": constants.USER_PROFILE_FIELD})


def get_user_profile_client(config: Optional[BoardConfig] = None) -> UserProfileApiClient:
    """Factory function to get an instance of UserProfileApiClient."""
    return UserProfileApiClient(config=config or get_config())
