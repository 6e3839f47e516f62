# provide dataclass models for catalog rows

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    uid: str
    name: str
    email: str
    bio: str = ""
    photo_url: str = ""


@dataclass(frozen=True)
class Product:
    pid: str
    title: str
    category: str  # "rod", "reel", "lure", ...
    price: int  # yen
    condition: str  # "new", "like-new", "good", "fair", "poor"
    image: str
    descr: str


@dataclass(frozen=True)
class ServerNotification:
    nid: int
    uid: str  # recipient
    icon_type: str  # "follow", "rating", "comment", "like"
    tag: str
    title: str
    description: str
    created_at: datetime
    is_unread: bool
    link: str
