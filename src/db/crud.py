# src/db/crud.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from db import models
from db.database import connect

_PRODUCT_COLUMNS = "pid, title, category, price, condition, image, descr"
_NOTIFICATION_COLUMNS = (
    "nid, uid, icon_type, tag, title, description, created_at, is_unread, link"
)


def _to_datetime(val) -> datetime:
    if isinstance(val, datetime):
        return val
    return datetime.fromisoformat(str(val))


def _row_to_product(row) -> models.Product:
    return models.Product(
        pid=row[0],
        title=row[1],
        category=row[2],
        price=int(row[3]),
        condition=row[4],
        image=row[5],
        descr=row[6],
    )


def _row_to_notification(row) -> models.ServerNotification:
    return models.ServerNotification(
        nid=int(row[0]),
        uid=row[1],
        icon_type=row[2],
        tag=row[3],
        title=row[4],
        description=row[5],
        created_at=_to_datetime(row[6]),
        is_unread=bool(row[7]),
        link=row[8],
    )


# ---------------------------
# Users
# ---------------------------


async def get_user(uid: str) -> Optional[models.User]:
    """Return the User for uid, or None if not found."""
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT uid, name, email, bio, photo_url FROM users WHERE uid = ?;", (uid,)
        )
        row = await cur.fetchone()
        await cur.close()
    if not row:
        return None
    return models.User(
        uid=row[0], name=row[1], email=row[2], bio=row[3], photo_url=row[4]
    )


# ---------------------------
# Products
# ---------------------------


async def search_products(
    keyword: str,
    page: int = 1,
    page_size: int = 5,
    category: Optional[str] = None,
) -> Tuple[List[models.Product], int]:
    """
    Case-insensitive search over title/descr.
    Multiple words match if any word matches; an empty keyword lists everything.
    Optionally restricted to one category.
    Returns (products for page, total_count).
    """
    words = [w for w in (keyword or "").strip().lower().split() if w]

    conds: List[str] = []
    params: List[str | int] = []
    if words:
        conds.append(
            "("
            + " OR ".join(["(LOWER(title) LIKE ? OR LOWER(descr) LIKE ?)"] * len(words))
            + ")"
        )
        for w in words:
            like = f"%{w}%"
            params.extend([like, like])
    if category:
        conds.append("category = ?")
        params.append(category)
    where_clause = " AND ".join(conds) if conds else "1 = 1"

    async with connect() as conn:
        cur = await conn.execute(
            f"SELECT COUNT(*) FROM products WHERE {where_clause};", tuple(params)
        )
        total = (await cur.fetchone())[0]
        await cur.close()

        offset = max(page - 1, 0) * page_size
        cur = await conn.execute(
            f"""
            SELECT {_PRODUCT_COLUMNS}
            FROM products
            WHERE {where_clause}
            ORDER BY pid
            LIMIT ? OFFSET ?;
            """,
            tuple(params + [page_size, offset]),
        )
        rows = await cur.fetchall()
        await cur.close()

    return [_row_to_product(row) for row in rows], total


async def get_product(pid: str) -> Optional[models.Product]:
    """Fetch a product by pid."""
    async with connect() as conn:
        cur = await conn.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE pid = ?;", (pid,)
        )
        row = await cur.fetchone()
        await cur.close()
    if not row:
        return None
    return _row_to_product(row)


# ---------------------------
# Notifications
# ---------------------------


async def list_notifications(
    uid: str, since: Optional[datetime] = None, after_nid: Optional[int] = None
) -> List[models.ServerNotification]:
    """Notifications addressed to uid, newest first.
    With since, only those created strictly after it.
    With after_nid, only those inserted after that nid, whatever their timestamp.
    """
    query = f"SELECT {_NOTIFICATION_COLUMNS} FROM notifications WHERE uid = ?"
    params: List = [uid]
    if since is not None:
        query += " AND created_at > ?"
        params.append(since.isoformat(sep=" ", timespec="seconds"))
    if after_nid is not None:
        query += " AND nid > ?"
        params.append(after_nid)
    query += " ORDER BY created_at DESC, nid DESC;"

    async with connect() as conn:
        cur = await conn.execute(query, tuple(params))
        rows = await cur.fetchall()
        await cur.close()
    return [_row_to_notification(row) for row in rows]


async def create_notification(
    uid: str,
    icon_type: str,
    tag: str,
    title: str,
    description: str,
    link: str = "",
    when: Optional[datetime] = None,
) -> models.ServerNotification:
    """Insert an unread notification for uid and return it.
    Descriptions longer than 50 characters are cut and end with '...'.
    Seeding helper: the client only reads notifications, so this is used to
    stage server-side activity for demos and tests.
    """
    when = (when or datetime.now()).replace(microsecond=0)
    if len(description) > 50:
        description = description[:50] + "..."
    async with connect() as conn:
        cur = await conn.execute(
            """
            INSERT INTO notifications(uid, icon_type, tag, title, description, created_at, is_unread, link)
            VALUES (?, ?, ?, ?, ?, ?, 1, ?);
            """,
            (uid, icon_type, tag, title, description, when.isoformat(sep=" "), link),
        )
        nid = cur.lastrowid
        await cur.close()
        await conn.commit()
    return models.ServerNotification(
        nid=nid,
        uid=uid,
        icon_type=icon_type,
        tag=tag,
        title=title,
        description=description,
        created_at=when,
        is_unread=True,
        link=link,
    )


async def mark_notifications_read(uid: str, nids: Optional[List[int]] = None) -> int:
    """Clear the unread flag for uid's notifications (all of them when nids is None).
    Returns the number of rows changed.
    """
    async with connect() as conn:
        if nids is None:
            cur = await conn.execute(
                "UPDATE notifications SET is_unread = 0 WHERE uid = ? AND is_unread = 1;",
                (uid,),
            )
        else:
            if not nids:
                return 0
            marks = ", ".join("?" * len(nids))
            cur = await conn.execute(
                f"UPDATE notifications SET is_unread = 0 WHERE uid = ? AND is_unread = 1 AND nid IN ({marks});",
                (uid, *nids),
            )
        changed = cur.rowcount
        await cur.close()
        await conn.commit()
    return changed
