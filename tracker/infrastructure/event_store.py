"""SQL Event Store - appends event documents to the event table.

Invariants:
    - One INSERT and one commit per call, in a fresh pooled session
    - The document is always a bound parameter
    - Failures surface as EventPersistenceError (mapped in DatabaseSessionManager)
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import insert

from tracker.infrastructure.database import DatabaseSessionManager
from tracker.models.event import event_table


class SqlEventStore:
    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    async def insert(self, document: dict[str, Any]) -> datetime:
        created_at = datetime.now(timezone.utc)
        async with self._manager.session() as db:
            await db.execute(
                insert(event_table).values(created_at=created_at, details=document),
            )
            await db.commit()
        return created_at
