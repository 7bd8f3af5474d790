from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from ofsc.exceptions import ValidationError
from ofsc.utils import JSONValue

Record = dict[str, JSONValue]


class RecordStore(ABC):
    """Keyed store of JSON records, for keeping collected data between runs."""

    @abstractmethod
    def add(self, record: Record) -> None: ...

    @abstractmethod
    def get(self, key: Any) -> Record | None: ...

    @abstractmethod
    def get_all(self) -> list[Record]: ...

    @abstractmethod
    def update(self, record: Record) -> None: ...

    @abstractmethod
    def remove(self, key: Any) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...


class JsonFileStore(RecordStore):
    """
    RecordStore persisted as a single JSON object on disk.

    Records are keyed by their ``key`` field (``"id"`` by default). The file
    is created on the first write.
    """

    def __init__(self, path: str, key: str = "id") -> None:
        self.path = path
        self.key = key

    def _load(self) -> dict[str, Record]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data: dict[str, Record] = json.load(f)
        return data

    def _save(self, records: dict[str, Record]) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(records, f)

    def _key_of(self, record: Record) -> str:
        if self.key not in record:
            raise ValidationError(f"Record has no {self.key!r} field: {record}")
        return str(record[self.key])

    def add(self, record: Record) -> None:
        """Insert a new record. Raises ValidationError if the key already exists."""
        records = self._load()
        key = self._key_of(record)
        if key in records:
            raise ValidationError(f"Record {key!r} already exists in {self.path}")
        records[key] = record
        self._save(records)

    def get(self, key: Any) -> Record | None:
        return self._load().get(str(key))

    def get_all(self) -> list[Record]:
        return list(self._load().values())

    def update(self, record: Record) -> None:
        """Insert or replace a record."""
        records = self._load()
        records[self._key_of(record)] = record
        self._save(records)

    def remove(self, key: Any) -> None:
        records = self._load()
        if records.pop(str(key), None) is not None:
            self._save(records)

    def clear(self) -> None:
        logger.debug(f"Clearing record store {self.path}")
        self._save({})
