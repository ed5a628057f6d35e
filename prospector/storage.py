"""
Prospect persistence.

The CRM is a single JSON list of prospects stored under one fixed key of a
string key-value store. Every operation reads (and, for writes, rewrites) the
whole list. There is no coordination between processes: the last writer wins.
"""

import json
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DEFAULT_DATABASE_URL, STORAGE_KEY
from .models import Prospect, UserStatus

logger = logging.getLogger(__name__)

Base = declarative_base()


class KeyValueStore:
    """String-keyed store holding string values."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-process store, lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class KeyValue(Base):
    """One row per key."""
    __tablename__ = "kv_store"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<KeyValue {self.key}>"


class SQLStore(KeyValueStore):
    """
    Key-value store in a SQL database (SQLite file by default).

    Usage:
        store = SQLStore("sqlite:///./prospector.db")
        store.set("key", "value")
    """

    def __init__(self, database_url: str = DEFAULT_DATABASE_URL):
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        self.database_url = database_url
        self.engine = create_engine(database_url, connect_args=connect_args)
        self._session_factory = sessionmaker(autoflush=False, bind=self.engine)
        Base.metadata.create_all(bind=self.engine)

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            row = db.get(KeyValue, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            row = db.get(KeyValue, key)
            if row:
                row.value = value
            else:
                db.add(KeyValue(key=key, value=value))
            db.commit()

    def delete(self, key: str) -> None:
        with self._session_factory() as db:
            row = db.get(KeyValue, key)
            if row:
                db.delete(row)
                db.commit()

    def close(self) -> None:
        self.engine.dispose()


class ProspectStore:
    """
    CRM persistence over a key-value store.

    Usage:
        store = ProspectStore(SQLStore())
        store.upsert(prospect)
        store.update_status(prospect.id, UserStatus.CONTACTED)
    """

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY):
        self.store = store
        self.key = key

    def list(self) -> List[Prospect]:
        """
        Read every stored prospect.

        A missing, unreadable or corrupted collection reads as empty.
        """
        prospects = []
        for entry in self._read_raw():
            try:
                prospects.append(Prospect.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning("Skipping unreadable prospect entry: %s", e)

        return prospects

    def get(self, prospect_id: str) -> Optional[Prospect]:
        for prospect in self.list():
            if prospect.id == prospect_id:
                return prospect
        return None

    # Writes work on the raw entries so that entries list() cannot read
    # are written back unchanged.

    def upsert(self, prospect: Prospect) -> None:
        """Replace the prospect with the same id, or append it."""
        entries = self._read_raw()
        for i, entry in enumerate(entries):
            if _entry_id(entry) == prospect.id:
                entries[i] = prospect.to_dict()
                break
        else:
            entries.append(prospect.to_dict())

        self._write(entries)
        logger.debug("Saved prospect %s (%s)", prospect.id, prospect.business_data.name)

    def update_status(self, prospect_id: str, status: UserStatus) -> None:
        """Change a prospect's status. Unknown ids are ignored."""
        status = UserStatus(status)
        entries = self._read_raw()
        found = False
        for entry in entries:
            if _entry_id(entry) == prospect_id:
                entry["user_status"] = status.value
                found = True

        if not found:
            logger.debug("No prospect %s to update", prospect_id)
            return

        self._write(entries)

    def remove(self, prospect_id: str) -> None:
        """Delete a prospect. Unknown ids are ignored."""
        entries = self._read_raw()
        remaining = [e for e in entries if _entry_id(e) != prospect_id]
        if len(remaining) == len(entries):
            logger.debug("No prospect %s to remove", prospect_id)
            return

        self._write(remaining)

    def _read_raw(self) -> list:
        try:
            raw = self.store.get(self.key)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Prospect store unreadable, treating as empty: %s", e)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning("Prospect store corrupted, treating as empty: %s", e)
            return []

        if not isinstance(data, list):
            logger.warning("Prospect store holds %s instead of a list", type(data).__name__)
            return []

        return data

    def _write(self, entries: list) -> None:
        payload = json.dumps(entries, ensure_ascii=False)
        self.store.set(self.key, payload)


def _entry_id(entry) -> Optional[str]:
    return entry.get("id") if isinstance(entry, dict) else None
