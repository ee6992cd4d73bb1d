"""Load NFPA 704 chemical databases from bundled JSON / CSV files.

Each entry carries ``NAME``, ``HEALTH``, ``FLAMMABILITY`` and ``REACTIVITY``
(numeric strings) plus an optional ``SPECIAL`` string of ``OX`` / ``SA`` / ``W``
tokens.  A bad entry is skipped and logged; the rest of the file still loads.
"""

from __future__ import annotations

import csv
import json
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from nfpachem.modules.chemicals.schemas import ChemicalRecord, HazardProperty, SpecialSymbol

logger = structlog.get_logger()

NAME_FIELD = "NAME"
SPECIAL_FIELD = "SPECIAL"

_TOKEN_SPLIT = re.compile(r"[,\s]+")


class ChemicalDataError(Exception):
    """Base class for database loading errors."""


class MalformedEntryError(ChemicalDataError):
    """A single database entry is missing a field or has a non-numeric rating."""


class DatabaseLoadError(ChemicalDataError):
    """A whole database file could not be read."""


def parse_special_string(text: str | None) -> dict[SpecialSymbol, bool]:
    """Turn e.g. ``"OX, W"`` into a total SpecialSymbol -> bool map."""
    specials = {symbol: False for symbol in SpecialSymbol}
    if not text:
        return specials
    for token in _TOKEN_SPLIT.split(text.strip()):
        if not token:
            continue
        symbol = SpecialSymbol.from_token(token)
        if symbol is None:
            logger.debug("special_token_ignored", token=token)
            continue
        specials[symbol] = True
    return specials


def _parse_rating(entry: Mapping[str, Any], prop: HazardProperty) -> int:
    raw = entry.get(prop.value)
    if raw is None:
        raise MalformedEntryError(f"missing field {prop.value}")
    if isinstance(raw, bool):
        raise MalformedEntryError(f"{prop.value} is not numeric: {raw!r}")
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError as e:
        raise MalformedEntryError(f"{prop.value} is not numeric: {raw!r}") from e


def record_from_entry(entry: Mapping[str, Any]) -> ChemicalRecord:
    """Build a record from one database entry.

    Raises:
        MalformedEntryError: missing field or non-numeric rating.
        ValidationError: a rating outside 0..4.
    """
    if not isinstance(entry, Mapping):
        raise MalformedEntryError(f"entry is not an object: {type(entry).__name__}")
    if NAME_FIELD not in entry:
        raise MalformedEntryError(f"missing field {NAME_FIELD}")

    name = entry[NAME_FIELD]
    special = entry.get(SPECIAL_FIELD)
    return ChemicalRecord(
        name=str(name) if name is not None else None,
        properties={prop: _parse_rating(entry, prop) for prop in HazardProperty},
        specials=parse_special_string(str(special) if special is not None else None),
    )


def load_entries(entries: Iterable[Any], source: str = "<memory>") -> list[ChemicalRecord]:
    records: list[ChemicalRecord] = []
    skipped = 0
    for index, entry in enumerate(entries):
        try:
            records.append(record_from_entry(entry))
        except (MalformedEntryError, ValidationError) as e:
            skipped += 1
            logger.warning(
                "chemical_entry_skipped",
                source=source,
                index=index,
                reason=str(e),
            )
    logger.info("chemical_database_loaded", source=source, records=len(records), skipped=skipped)
    return records


def load_json(path: str | Path) -> list[ChemicalRecord]:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DatabaseLoadError(f"could not read {path}: {e}") from e
    if not isinstance(data, list):
        raise DatabaseLoadError(f"{path} must contain a JSON array of chemicals")
    return load_entries(data, source=str(path))


def load_csv(path: str | Path) -> list[ChemicalRecord]:
    path = Path(path)
    try:
        with path.open(encoding="utf-8", newline="") as f:
            rows = [
                {(key or "").strip().upper(): value for key, value in row.items()}
                for row in csv.DictReader(f)
            ]
    except (OSError, csv.Error) as e:
        raise DatabaseLoadError(f"could not read {path}: {e}") from e
    return load_entries(rows, source=str(path))


def load_database(path: str | Path) -> list[ChemicalRecord]:
    """Load a database file, choosing the parser from its suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        return load_json(path)
    if suffix == ".csv":
        return load_csv(path)
    raise DatabaseLoadError(f"unsupported database format: {path.name}")
