from __future__ import annotations

from typing import Optional

import aiosqlite

import db.crud as crud
from stores.models import UserProfile
from utils.logger import get_logger

_logger = get_logger(__name__)

DEFAULT_DISPLAY_NAME = "Anonymous"
DEFAULT_USERNAME = "user"


def fallback_profile(
    display_name: Optional[str] = None, email: Optional[str] = None
) -> UserProfile:
    """Profile shown for a signed-in user that has no catalog record."""
    username = email.split("@")[0] if email else ""
    return UserProfile(
        display_name=display_name or DEFAULT_DISPLAY_NAME,
        username=username or DEFAULT_USERNAME,
    )


class ProfileStore:
    """
    Profile of the signed-in user, in memory only.

    loading starts True and stays True until the first refresh finishes;
    reset_profile puts both fields back to that initial state.
    """

    def __init__(self) -> None:
        self.profile = UserProfile()
        self.loading = True

    def set_profile(self, profile: UserProfile) -> None:
        self.profile = profile

    def set_loading(self, loading: bool) -> None:
        self.loading = loading

    async def refresh_profile(
        self,
        uid: str,
        fallback_name: Optional[str] = None,
        fallback_email: Optional[str] = None,
    ) -> UserProfile:
        """Load uid's profile from the catalog, falling back to defaults."""
        self.set_loading(True)
        try:
            user = await crud.get_user(uid)
        except aiosqlite.Error as e:
            _logger.warning(f"Could not load profile for {uid}: {e!r}")
            user = None

        if user is None:
            self.set_profile(fallback_profile(fallback_name, fallback_email))
        else:
            self.set_profile(
                UserProfile(
                    display_name=user.name,
                    username=user.email.split("@")[0] or DEFAULT_USERNAME,
                    bio=user.bio,
                    photo_url=user.photo_url,
                )
            )
        self.set_loading(False)
        return self.profile

    def reset_profile(self) -> None:
        self.profile = UserProfile()
        self.loading = True
