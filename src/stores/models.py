# dataclass models held by the client-side stores

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _int_field(
    data: Dict[str, Any], key: str, default: Any = None, minimum: Optional[int] = 0
) -> int:
    """Read an integer field from persisted data, ValueError if it is anything else."""
    value = data.get(key, default)
    # bool is an int subclass but never a valid amount
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise ValueError(f"{key} must be at least {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class CartProduct:
    """What callers hand to CartStore.add_item; the store fixes the quantity."""

    id: str
    title: str
    price: int  # integer currency units (yen)
    image: str


@dataclass(frozen=True)
class CartLineItem:
    id: str
    title: str
    price: int
    image: str
    quantity: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "image": self.image,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CartLineItem:
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            price=_int_field(data, "price"),
            image=str(data.get("image", "")),
            quantity=_int_field(data, "quantity", default=1, minimum=1),
        )


@dataclass(frozen=True)
class CartState:
    items: List[CartLineItem] = field(default_factory=list)
    shipping_fee: int = 0
    total_amount: int = 0
    owner_uid: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ownerUid": self.owner_uid,
            "items": [item.to_dict() for item in self.items],
            "shippingFee": self.shipping_fee,
            "totalAmount": self.total_amount,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CartState:
        owner = data.get("ownerUid")
        return cls(
            items=[CartLineItem.from_dict(i) for i in data.get("items") or []],
            shipping_fee=_int_field(data, "shippingFee", default=0, minimum=None),
            total_amount=_int_field(data, "totalAmount", default=0, minimum=None),
            owner_uid=str(owner) if owner is not None else None,
        )


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    title: str
    price: int
    image_url: str
    product_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "imageUrl": self.image_url,
            "productUrl": self.product_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> HistoryEntry:
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            price=_int_field(data, "price"),
            image_url=str(data.get("imageUrl", "")),
            product_url=str(data.get("productUrl", "")),
        )


@dataclass(frozen=True)
class UserProfile:
    display_name: str = ""
    username: str = ""
    bio: str = ""
    photo_url: str = ""


@dataclass(frozen=True)
class NotificationEntry:
    id: int
    type: str  # tag such as "follow", "rating", "comment", "like"
    title: str
    content: str
    time: str  # display string, e.g. "2 hours ago"
    unread: bool
    icon: str
