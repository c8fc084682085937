from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.cart_session import CartSession


class SessionRepository:
    """Session store: session id -> opaque cart blob (list of dicts).

    A session that has not been written for `max_age_seconds` is expired: its
    row is deleted on the next read and the caller sees an empty cart.
    """

    def __init__(self, db: Session, max_age_seconds: Optional[int] = None):
        self.db = db
        if max_age_seconds is None:
            max_age_seconds = settings.SESSION_MAX_AGE_SECONDS
        self.max_age = timedelta(seconds=max_age_seconds)

    def _get_row(self, session_id: str) -> Optional[CartSession]:
        return (
            self.db.query(CartSession)
            .filter(CartSession.session_id == session_id)
            .first()
        )

    def _is_expired(self, row: CartSession) -> bool:
        updated = row.updated_at
        if updated is None:
            return False
        # sqlite hands back naive datetimes
        if updated.tzinfo is None:
            updated = updated.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) - updated > self.max_age

    def get_cart(self, session_id: Optional[str]) -> List[dict]:
        if not session_id:
            return []
        row = self._get_row(session_id)
        if not row:
            return []
        if self._is_expired(row):
            self.db.delete(row)
            self.db.flush()
            return []
        if not isinstance(row.items, list):
            return []
        return list(row.items)

    def save_cart(self, session_id: str, items: List[dict]) -> None:
        now = datetime.now(timezone.utc)
        row = self._get_row(session_id)
        if row:
            # assign a new list so the JSON column is flagged dirty
            row.items = list(items)
            row.updated_at = now
        else:
            row = CartSession(session_id=session_id, items=list(items), updated_at=now)
            self.db.add(row)
        self.db.flush()

    def clear(self, session_id: str) -> None:
        self.save_cart(session_id, [])
