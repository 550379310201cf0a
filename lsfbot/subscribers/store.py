import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, ValidationError

from lsfbot.config import settings
from lsfbot.errors import PersistenceError
from lsfbot.schedule.models import Group

logger = logging.getLogger(__name__)

DEFAULT_LEAD_TIME_MINUTES = 30


class SubscriberPreference(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    group: Optional[Group] = None
    enabled: bool = True
    lead_time: Optional[NonNegativeInt] = None
    follow_previous: bool = False


class SubscriberFile(BaseModel):
    subscribers: List[SubscriberPreference] = Field(default_factory=list)


Mutator = Callable[[Optional[SubscriberPreference]], Optional[SubscriberPreference]]


class SubscriberStore:
    """
    Subscriber preferences kept in memory and persisted as one JSON document.

    Every mutation rewrites the whole file. The in-memory copy only changes
    after the write succeeded, so a failed save never leaves readers with
    state that is not on disk.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._records: tuple[SubscriberPreference, ...] = ()
        self._lock = threading.RLock()

    def _read(self) -> tuple[SubscriberPreference, ...]:
        if not self.path.exists():
            return ()
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to read subscribers file {self.path}: {exc}") from exc
        if not raw.strip():
            return ()
        try:
            document = SubscriberFile.model_validate_json(raw)
        except ValidationError as exc:
            raise PersistenceError(f"Invalid subscribers file {self.path}: {exc}") from exc
        return tuple(document.subscribers)

    def _write(self, records: tuple[SubscriberPreference, ...]) -> None:
        document = SubscriberFile(subscribers=list(records))
        payload = json.dumps(document.model_dump(mode="json"), indent=2, ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload + "\n")
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(f"Failed to write subscribers file {self.path}: {exc}") from exc

    def reload(self) -> None:
        with self._lock:
            self._records = self._read()
        logger.debug("Loaded %d subscriber record(s) from %s", len(self._records), self.path)

    def list(self) -> List[SubscriberPreference]:
        return list(self._records)

    def get(self, subscriber_id: int) -> Optional[SubscriberPreference]:
        for record in self._records:
            if record.id == subscriber_id:
                return record
        return None

    def upsert(self, subscriber_id: int, mutate: Mutator) -> Optional[SubscriberPreference]:
        """
        Apply `mutate` to the record of `subscriber_id` (or None if absent) and
        persist the result. Returning None from `mutate` keeps the record as is.
        """
        with self._lock:
            records = list(self._records)
            position = next((i for i, record in enumerate(records) if record.id == subscriber_id), None)
            current = records[position] if position is not None else None
            updated = mutate(current)
            if updated is None:
                updated = current
            elif updated.id != subscriber_id:
                raise ValueError("Mutator must not change the subscriber id")
            elif position is None:
                records.append(updated)
            else:
                records[position] = updated
            self._write(tuple(records))
            self._records = tuple(records)
            return updated

    def remove(self, subscriber_id: int) -> bool:
        with self._lock:
            records = tuple(record for record in self._records if record.id != subscriber_id)
            removed = len(records) != len(self._records)
            self._write(records)
            self._records = records
            return removed


subscriber_store = SubscriberStore(settings.SUBSCRIBERS_PATH)
