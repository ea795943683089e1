"""Destination directory adapters.

The engine only needs one capability from the outside world: the list of
destinations that are currently bookable. Adapters re-read their source on
every call so activation changes are seen by the next command.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Protocol

import yaml
from pydantic import ValidationError

from .models import DestinationEntry


class DirectoryError(Exception):
    """The destination source could not be read."""


class DestinationDirectory(Protocol):
    def list_active_destinations(self) -> List[DestinationEntry]:
        ...


def is_bookable(entry: DestinationEntry, today: date) -> bool:
    """Active and not already past the end of its trip period."""
    if not entry.active:
        return False
    if entry.trip_end is not None and entry.trip_end < today:
        return False
    return True


class StaticDestinationDirectory:
    """In-memory directory; keeps the given order."""

    def __init__(self, entries: Iterable[DestinationEntry], today: Callable[[], date] = date.today):
        self.entries = list(entries)
        self.today = today

    def list_active_destinations(self) -> List[DestinationEntry]:
        now = self.today()
        return [e for e in self.entries if is_bookable(e, now)]


class YamlDestinationDirectory:
    """Directory backed by a YAML export of the destinations table.

    Accepts both the short keys (``active``, ``trip_end``) and the column
    names of the export (``is_active``, ``periodo_viagem_fim``). Results are
    sorted by name, like the destinations listing in the back office.
    """

    def __init__(self, path: Path, today: Callable[[], date] = date.today):
        self.path = Path(path)
        self.today = today

    def list_active_destinations(self) -> List[DestinationEntry]:
        now = self.today()
        entries = [e for e in self._load() if is_bookable(e, now)]
        entries.sort(key=lambda e: e.name.casefold())
        return entries

    def _load(self) -> List[DestinationEntry]:
        if not self.path.exists():
            raise DirectoryError(f"destinations file not found: {self.path}")
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise DirectoryError(f"invalid destinations file {self.path}: {e}") from e

        if not data:
            return []
        if isinstance(data, dict):
            data = data.get("destinations") or []
        if not isinstance(data, list):
            raise DirectoryError(f"destinations file {self.path} must hold a list")

        entries = []
        for item in data:
            entry = _entry_from_row(item)
            if entry is not None:
                entries.append(entry)
        return entries


def _entry_from_row(item) -> Optional[DestinationEntry]:
    if not isinstance(item, dict):
        return None
    row = dict(item)
    if "active" not in row and "is_active" in row:
        row["active"] = row.pop("is_active")
    if "trip_end" not in row and "periodo_viagem_fim" in row:
        row["trip_end"] = row.pop("periodo_viagem_fim")
    if isinstance(row.get("trip_end"), datetime):
        row["trip_end"] = row["trip_end"].date()
    if "id" in row:
        row["id"] = str(row["id"])
    try:
        return DestinationEntry.model_validate({k: row[k] for k in ("id", "name", "active", "trip_end") if k in row})
    except ValidationError:
        # linhas inválidas são ignoradas
        return None
