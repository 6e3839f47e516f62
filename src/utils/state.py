from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import db.crud as crud
from db.local_storage import LocalStorage, open_local_storage
from db.models import Product, User
from stores.cart import CartStore
from stores.history import RecentHistoryStore
from stores.models import CartProduct, HistoryEntry
from stores.notifications import NotificationStore
from stores.profile import ProfileStore
from utils.config import settings
from utils.logger import get_logger
from utils.pure import compute_totals, notification_from_server

_logger = get_logger(__name__)


@dataclass
class GlobalState:
    """
    Centralized application state shared by screens.

    Built once by the app and handed to every screen; the stores live
    here instead of in module globals so tests can build their own.

    Fields:
      - uid: the signed-in user, None before login
      - storage: durable local storage, None when it could not be opened
      - cart, history, notifications, profile: the client-side stores
    """

    storage: Optional[LocalStorage] = None
    uid: Optional[str] = None

    cart: CartStore = field(init=False)
    history: RecentHistoryStore = field(init=False)
    notifications: NotificationStore = field(init=False)
    profile: ProfileStore = field(init=False)

    # highest nid delivered so far; 0 once loaded with nothing to show
    _latest_nid: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.cart = CartStore(self.storage)
        self.history = RecentHistoryStore(self.storage)
        self.notifications = NotificationStore()
        self.profile = ProfileStore()

    @classmethod
    def from_settings(cls) -> GlobalState:
        return cls(
            storage=open_local_storage(
                settings.storage_path, quota=settings.storage_quota
            )
        )

    # ---------------------------
    # Session
    # ---------------------------

    async def login(self, uid: str) -> Optional[User]:
        """Sign in as uid. Returns the user, or None if no such user exists."""
        user = await crud.get_user(uid)
        if user is None:
            return None
        self.uid = user.uid
        self.cart.sync_owner(user.uid)
        await self.profile.refresh_profile(user.uid, user.name, user.email)
        self._latest_nid = None
        await self.refresh_notifications()
        return user

    def logout(self) -> None:
        self.cart.sync_owner(None)
        self.notifications.set_notifications([])
        self.profile.reset_profile()
        self._latest_nid = None
        self.uid = None

    # ---------------------------
    # Cart & history
    # ---------------------------

    def add_to_cart(self, product: Product) -> bool:
        """Put product in the cart. False if it was already there."""
        if product.pid in self.cart:
            return False
        self.cart.add_item(
            CartProduct(
                id=product.pid,
                title=product.title,
                price=product.price,
                image=product.image,
            )
        )
        self.update_cart_totals()
        return True

    def remove_from_cart(self, pid: str) -> None:
        self.cart.remove_item(pid)
        self.update_cart_totals()

    def update_cart_totals(self) -> None:
        _, shipping, total = compute_totals(self.cart.items)
        self.cart.set_totals(shipping, total)

    def record_view(self, product: Product) -> None:
        self.history.add_to_history(
            HistoryEntry(
                id=product.pid,
                title=product.title,
                price=product.price,
                image_url=product.image,
                product_url=f"/product-detail/{product.pid}",
            )
        )

    # ---------------------------
    # Notifications
    # ---------------------------

    async def refresh_notifications(self) -> int:
        """
        Pull notifications for the signed-in user from the catalog.
        The first call replaces the list; later calls prepend only newer ones.
        Returns how many entries were loaded.
        """
        if self.uid is None:
            return 0

        records = await crud.list_notifications(self.uid, after_nid=self._latest_nid)
        now = datetime.now()
        if self._latest_nid is None:
            self.notifications.set_notifications(
                [notification_from_server(r, now) for r in records]
            )
        else:
            # records are newest first, prepend oldest first to keep that order
            for r in reversed(records):
                self.notifications.add_notification(notification_from_server(r, now))

        if records:
            self._latest_nid = max(self._latest_nid or 0, *(r.nid for r in records))
        elif self._latest_nid is None:
            self._latest_nid = 0
        _logger.debug(f"Loaded {len(records)} notification(s) for {self.uid}.")
        return len(records)

    async def mark_notification_read(self, nid: int) -> None:
        self.notifications.mark_as_read(nid)
        if self.uid is not None:
            await crud.mark_notifications_read(self.uid, [nid])

    async def mark_all_notifications_read(self) -> None:
        self.notifications.mark_all_as_read()
        if self.uid is not None:
            await crud.mark_notifications_read(self.uid)
