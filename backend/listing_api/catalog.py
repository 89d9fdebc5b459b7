from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from listing_api.db import session_scope
from listing_api.exceptions import NotFound, ValidationError
from listing_api.models import Property
from listing_api.schemas import PropertyCreate, PropertyUpdate

logger = logging.getLogger(__name__)


def _escape_like(s: str) -> str:
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _flush(db: Session) -> None:
    try:
        db.flush()
    except (DataError, IntegrityError) as e:
        # e.g. a value longer than its column on Postgres.
        raise ValidationError(str(e.orig)) from e


class PropertyCatalog:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._sessions = session_factory

    def create(self, data: PropertyCreate) -> Property:
        with session_scope(self._sessions) as db:
            prop = Property(**data.model_dump(), views=0)
            db.add(prop)
            _flush(db)
        logger.info("Created property_id=%s", prop.id)
        return prop

    def list(
        self,
        *,
        liked: bool | None = None,
        location: str | None = None,
        title: str | None = None,
    ) -> list[Property]:
        """
        All properties matching every given filter. `title` is a case-insensitive
        substring match; `liked` and `location` are exact.
        """
        stmt = select(Property)
        if liked is not None:
            stmt = stmt.where(Property.liked == liked)
        if location:
            stmt = stmt.where(Property.location == location)
        if title:
            pattern = f"%{_escape_like(title.lower())}%"
            stmt = stmt.where(func.lower(Property.title).like(pattern, escape="\\"))
        with session_scope(self._sessions) as db:
            return list(db.execute(stmt.order_by(Property.id)).scalars().all())

    def get(self, property_id: int) -> Property:
        with session_scope(self._sessions) as db:
            prop = db.get(Property, property_id)
            if prop is None:
                raise NotFound("Property not found")
            return prop

    def get_many(self, property_ids: list[int]) -> list[Property]:
        """
        Load properties by id, keeping the order given. Ids with no row are
        skipped.
        """
        if not property_ids:
            return []
        with session_scope(self._sessions) as db:
            rows = db.execute(select(Property).where(Property.id.in_(property_ids))).scalars().all()
        by_id = {p.id: p for p in rows}
        return [by_id[i] for i in dict.fromkeys(property_ids) if i in by_id]

    def update(self, property_id: int, patch: PropertyUpdate) -> Property:
        changes: dict[str, Any] = patch.model_dump(exclude_unset=True)
        with session_scope(self._sessions) as db:
            prop = db.get(Property, property_id)
            if prop is None:
                raise NotFound("Property not found")
            for field, value in changes.items():
                setattr(prop, field, value)
            prop.updated_at = dt.datetime.now(dt.timezone.utc)
            db.add(prop)
            _flush(db)
            return prop
