import asyncio
import logging
from typing import Callable, Optional, Tuple

from app.core.config import BoardConfig
from app.core.exceptions import BoardException, ValidationError
from app.core.result import Result
from app.models.line_item import UserProfile
from app.services.api_clients.user_profile_client import UserProfileApiClient, get_user_profile_client

logger = logging.getLogger(__name__)

ProfileCallback = Callable[[Result[UserProfile, BoardException]], None]


def read_profile_name(payload) -> Optional[str]:
    """
    Reads the profile display name from a user record.
    Accepts {profile: {displayValue}} as well as the record API's {fields: {Profile: {displayValue}}}.
    """
    if not isinstance(payload, dict):
        return None
    profile = payload.get("profile")
    if profile is None:
        profile = (payload.get("fields") or {}).get("Profile")
    if not isinstance(profile, dict):
        return None
    return profile.get("displayValue")


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class ProfileSubscription:
    """Handle returned by IdentityService.subscribe(); call unsubscribe() on teardown."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        self.task: Optional[asyncio.Task] = None
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        if self.task and not self.task.done():
            loop = self.task.get_loop()
            if _running_loop() is loop:
                self.task.cancel()
            elif not loop.is_closed():
                # unsubscribe may come from the UI thread
                loop.call_soon_threadsafe(self.task.cancel)
        logger.debug(f"Profile subscription for {self.user_id} cancelled.")


class IdentityService:
    """
    Resolves the current user's profile name and keeps it fresh by polling
    the user record while a subscription is active.
    """

    def __init__(self, config: BoardConfig, client: Optional[UserProfileApiClient] = None):
        self.config = config
        self.client = client or get_user_profile_client(config)

    async def resolve_profile(self, user_id: Optional[str]) -> Result[UserProfile, BoardException]:
        if not user_id:
            return Result.failure(ValidationError("user_id", "no current user id configured", user_id))

        result = await self.client.get_user(user_id)
        if result.is_failure():
            return result

        display_name = read_profile_name(result.value)
        if not display_name:
            return Result.failure(ValidationError("profile.displayValue", "missing from the user record", result.value))
        return Result.success(UserProfile(display_name=display_name))

    async def subscribe(self, user_id: Optional[str], callback: ProfileCallback) -> ProfileSubscription:
        """
        Resolves the profile once, hands the outcome to callback, then polls every
        profile_poll_interval seconds and calls back again whenever the outcome changes.
        """
        subscription = ProfileSubscription(user_id)
        result = await self.resolve_profile(user_id)
        last_seen = self._outcome_key(result)
        callback(result)

        interval = self.config.profile_poll_interval
        if interval > 0 and user_id:
            subscription.task = asyncio.create_task(
                self._poll(subscription, callback, interval, last_seen),
                name=f"profile-poll-{user_id}",
            )
        return subscription

    async def _poll(self, subscription: ProfileSubscription, callback: ProfileCallback,
                    interval: float, last_seen: Tuple[bool, Optional[str]]) -> None:
        while subscription.active:
            await asyncio.sleep(interval)
            if not subscription.active:
                break
            result = await self.resolve_profile(subscription.user_id)
            key = self._outcome_key(result)
            if key != last_seen and subscription.active:
                logger.info(f"Profile for {subscription.user_id} changed: {key}")
                last_seen = key
                callback(result)

    @staticmethod
    def _outcome_key(result: Result[UserProfile, BoardException]) -> Tuple[bool, Optional[str]]:
        if result.is_success():
            return True, result.value.display_name
        return False, None

    async def close(self) -> None:
        await self.client.close()
