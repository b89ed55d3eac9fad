# formhooks/webhooks/delivery_log.py
"""
Delivery log - append-only record of every webhook delivery attempt.

Entries are never edited or removed here. The log grows without bound;
pruning is left to whoever administers the store.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import uuid4

from ..logging import get_logger
from .models import DeliveryLogEntry, FormhooksError, StatusCode
from .store import LOGS_OPTION, MemoryOptionStore, OptionStore

logger = get_logger(__name__)


class NotFoundError(FormhooksError):
    """Raised when a log entry id is not in the log."""

    def __init__(self, log_id: str):
        self.log_id = log_id
        super().__init__(f"Log entry not found: {log_id}")


def new_log_id() -> str:
    return f"log_{uuid4().hex}"


class DeliveryLog:
    """Append-only delivery log backed by an OptionStore."""

    def __init__(self, store: Optional[OptionStore] = None):
        self.store = store or MemoryOptionStore()

    def append(
        self,
        form_id: Any,
        status_code: StatusCode,
        payload_json: str,
    ) -> DeliveryLogEntry:
        """
        Record one delivery attempt.

        The id and timestamp are assigned here.

        Args:
            form_id: Form the submission came from
            status_code: HTTP status, or ERROR_STATUS if the request failed
            payload_json: Exact JSON body that was sent

        Returns:
            The stored entry
        """
        entry = DeliveryLogEntry(
            id=new_log_id(),
            timestamp=datetime.now(timezone.utc),
            form_id=form_id,
            status_code=status_code,
            payload_json=payload_json,
        )
        row = entry.to_dict()
        self.store.update(LOGS_OPTION, lambda rows: rows + [row], default=[])

        logger.debug(
            "delivery_logged",
            log_id=entry.id,
            form_id=form_id,
            status_code=status_code,
        )
        return entry

    def list(self) -> List[DeliveryLogEntry]:
        """All entries, oldest first."""
        rows = self.store.get(LOGS_OPTION, [])
        return [DeliveryLogEntry.from_dict(row) for row in rows]

    def get(self, log_id: str) -> Optional[DeliveryLogEntry]:
        """Find an entry by id, or None."""
        for entry in self.list():
            if entry.id == log_id:
                return entry
        return None

    def require(self, log_id: str) -> DeliveryLogEntry:
        """
        Like get(), but raises NotFoundError for unknown ids.

        Raises:
            NotFoundError: If no entry has this id
        """
        entry = self.get(log_id)
        if entry is None:
            raise NotFoundError(log_id)
        return entry
