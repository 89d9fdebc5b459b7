from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable

from sqlalchemy import func, select, update as sa_update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, sessionmaker

from listing_api.db import session_scope
from listing_api.exceptions import NotFound, ServerError
from listing_api.models import Property, ViewRecord

logger = logging.getLogger(__name__)

VIEW_WINDOW = dt.timedelta(hours=120)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ViewPolicy:
    """
    Counts a user's visits to a property at most once per rolling window.

    The ledger upsert only writes when there is no record for the pair or the
    record is older than the window start, and the counter is bumped only when
    that upsert actually wrote. Both happen in one transaction, so concurrent
    calls for the same pair cannot double count.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        window: dt.timedelta = VIEW_WINDOW,
        clock: Callable[[], dt.datetime] = _utcnow,
    ) -> None:
        self._sessions = session_factory
        self._window = window
        self._clock = clock

    def _claim_stmt(self, db: Session, *, user_id: int, property_id: int, now: dt.datetime):
        dialect = db.get_bind().dialect.name
        if dialect == "postgresql":
            insert = postgresql.insert
        elif dialect == "sqlite":
            insert = sqlite.insert
        else:
            raise ServerError(f"view ledger upsert not supported on {dialect}")

        table = ViewRecord.__table__
        cutoff = now - self._window
        stmt = insert(table).values(user_id=user_id, property_id=property_id, last_viewed_at=now)
        return stmt.on_conflict_do_update(
            index_elements=[table.c.user_id, table.c.property_id],
            set_={"last_viewed_at": stmt.excluded.last_viewed_at},
            where=table.c.last_viewed_at < cutoff,
        ).returning(table.c.user_id)

    def register_view(self, user_id: int, property_id: int) -> int:
        """
        Record a view and return the property's current view count.
        """
        now = self._clock()
        with session_scope(self._sessions) as db:
            claimed = db.execute(
                self._claim_stmt(db, user_id=user_id, property_id=property_id, now=now)
            ).first() is not None
            if claimed:
                db.execute(
                    sa_update(Property)
                    .where(Property.id == property_id)
                    .values(views=func.coalesce(Property.views, 0) + 1)
                    .execution_options(synchronize_session=False)
                )
                logger.debug("Counted view user_id=%s property_id=%s", user_id, property_id)
            views = db.execute(select(Property.views).where(Property.id == property_id)).first()
            if views is None:
                # Rolls back the ledger write as well.
                raise NotFound(f"Property {property_id} not found")
            return int(views[0] or 0)
