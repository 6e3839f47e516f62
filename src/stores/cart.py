from __future__ import annotations

import dataclasses
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from db.local_storage import LocalStorage
from stores.models import CartLineItem, CartProduct, CartState
from stores.persistence import PersistedSlot
from utils.logger import get_logger

_logger = get_logger(__name__)

CART_STORAGE_KEY = "cart-storage"
CART_STORAGE_VERSION = 2


def migrate_cart_payload(payload: Any) -> Optional[CartState]:
    """
    Turn a persisted {"state": ..., "version": n} wrapper into a CartState.

    Versions 0 and 1 are lifted to the current layout with missing fields
    defaulted. Anything unrecognised (newer version, wrong shape, bad items)
    yields None so the caller starts from an empty cart.
    """
    if not isinstance(payload, dict):
        return None
    state = payload.get("state")
    version = payload.get("version", 0)
    if not isinstance(state, dict) or not isinstance(version, int):
        return None
    if version > CART_STORAGE_VERSION:
        _logger.warning(f"Cart storage version {version} is newer than supported.")
        return None

    if version == 0:
        # no owner tracking before v1
        state = {
            "ownerUid": None,
            "items": state.get("items") or [],
            "shippingFee": state.get("shippingFee") or 0,
            "totalAmount": state.get("totalAmount") or 0,
        }
    elif version == 1:
        state = {
            "ownerUid": state.get("ownerUid") or None,
            "items": state.get("items") or [],
            "shippingFee": state.get("shippingFee") or 0,
            "totalAmount": state.get("totalAmount") or 0,
        }

    try:
        cart = CartState.from_dict(state)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        _logger.warning(f"Discarding unreadable cart state: {e!r}")
        return None

    # keep the first line per id
    seen = set()
    items = []
    for item in cart.items:
        if item.id in seen:
            continue
        seen.add(item.id)
        items.append(item)
    return dataclasses.replace(cart, items=items)


class CartStore:
    """
    Shopping cart for one device, persisted under a fixed storage key.

    Totals are not derived from the items: the caller computes shipping and
    total and injects them with set_totals. Adding an id that is already in
    the cart does nothing; quantities stay at 1.
    """

    def __init__(
        self, storage: Optional[LocalStorage], key: str = CART_STORAGE_KEY
    ) -> None:
        self._slot = PersistedSlot(storage, key)
        self._state = CartState()
        self.rehydrate()

    # ---------------------------
    # Read access
    # ---------------------------

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def items(self) -> List[CartLineItem]:
        return list(self._state.items)

    @property
    def shipping_fee(self) -> int:
        return self._state.shipping_fee

    @property
    def total_amount(self) -> int:
        return self._state.total_amount

    @property
    def owner_uid(self) -> Optional[str]:
        return self._state.owner_uid

    def __len__(self) -> int:
        return len(self._state.items)

    def __contains__(self, item_id: object) -> bool:
        return any(item.id == item_id for item in self._state.items)

    # ---------------------------
    # Persistence
    # ---------------------------

    def rehydrate(self) -> None:
        """Replace in-memory state with whatever is persisted, or an empty cart."""
        payload = self._slot.load()
        if payload is None:
            self._state = CartState()
            return

        cart = migrate_cart_payload(payload)
        if cart is None:
            self._state = CartState()
            return

        self._state = cart
        _logger.debug(f"Rehydrated cart with {len(cart.items)} item(s).")
        if payload.get("version") != CART_STORAGE_VERSION:
            self._persist()

    def _persist(self) -> bool:
        return self._slot.save(
            {"state": self._state.to_dict(), "version": CART_STORAGE_VERSION}
        )

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        """Write the full state back once the wrapped change completes."""
        yield
        self._persist()

    # ---------------------------
    # Mutations
    # ---------------------------

    def add_item(self, product: CartProduct) -> None:
        if product.id in self:
            return

        with self._mutation():
            line = CartLineItem(
                id=product.id,
                title=product.title,
                price=product.price,
                image=product.image,
                quantity=1,
            )
            self._state = dataclasses.replace(
                self._state, items=[*self._state.items, line]
            )

    def remove_item(self, item_id: str) -> None:
        with self._mutation():
            self._state = dataclasses.replace(
                self._state,
                items=[item for item in self._state.items if item.id != item_id],
            )

    def clear_cart(self) -> None:
        with self._mutation():
            self._state = dataclasses.replace(
                self._state, items=[], shipping_fee=0, total_amount=0
            )

    def set_totals(self, shipping: int, total: int) -> None:
        with self._mutation():
            self._state = dataclasses.replace(
                self._state, shipping_fee=shipping, total_amount=total
            )

    def sync_owner(self, uid: Optional[str]) -> None:
        """Start an empty cart when the signed-in user changes."""
        if self._state.owner_uid == uid:
            return

        _logger.debug(f"Cart owner changed from {self._state.owner_uid} to {uid}.")
        with self._mutation():
            self._state = CartState(owner_uid=uid)
