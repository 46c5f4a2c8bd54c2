"""
Job Record Normalization

Turns loosely structured job records (as returned by the platform API and
parsed from JSON) into JobRecord instances the graph builder can consume.

Design Decisions:
    - Only the record id is required; every other field has a default
    - Malformed records and entries are skipped and logged, never raised
    - Entity references accept "dataSourceId" as an alias for "id"
    - Metadata keys are accepted in both camelCase and snake_case

Input Shape:
    { "id": str, "name": str,
      "inputs":  [{"id": str, "name": str}, ...],
      "outputs": [{"id": str, "name": str}, ...],
      "status": str, "owner": str, "executionCount": int, ... }
"""

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional, Union

from lineage.models import EntityRef, JobMetadata, JobRecord

logger = logging.getLogger(__name__)

RecordLike = Union[JobRecord, Mapping[str, Any]]

_ENTITY_ID_KEYS = ("id", "dataSourceId")

# Normalized field -> accepted source keys, first match wins
_METADATA_KEYS = {
    "status": ("status",),
    "owner": ("owner",),
    "execution_count": ("executionCount", "execution_count"),
    "success_rate": ("successRate", "success_rate"),
    "last_updated": ("lastUpdated", "last_updated"),
}


class RecordLoadError(ValueError):
    """Raised when a record file cannot be read or has the wrong shape."""


def coerce_id(value: Any) -> Optional[str]:
    """
    Convert a raw identifier to a non-empty string.

    Strings are kept exactly as given, so "d1" and "d1 " are distinct ids;
    empty or whitespace-only strings are rejected. Integers are stringified.
    Booleans, floats and anything else are rejected.

    Returns:
        The identifier, or None if the value cannot serve as one
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value if value.strip() else None
    return None


def _coerce_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    name = str(value).strip()
    return name or None


def normalize_entity(raw: Any) -> Optional[EntityRef]:
    """
    Normalize a single input/output entry.

    Args:
        raw: A mapping with an id (or dataSourceId) and an optional name

    Returns:
        EntityRef, or None if the entry has no usable id
    """
    if isinstance(raw, EntityRef):
        return raw
    if not isinstance(raw, Mapping):
        return None

    for key in _ENTITY_ID_KEYS:
        entity_id = coerce_id(raw.get(key))
        if entity_id is not None:
            return EntityRef(id=entity_id, name=_coerce_name(raw.get("name")))
    return None


def _normalize_entities(raw: Any, record_id: str, side: str) -> tuple[EntityRef, ...]:
    if raw is None:
        return ()
    if isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
        logger.warning("Job %s: ignoring non-list %s", record_id, side)
        return ()

    entities = []
    for position, entry in enumerate(raw):
        entity = normalize_entity(entry)
        if entity is None:
            logger.warning(
                "Job %s: skipping malformed %s entry at position %d",
                record_id,
                side,
                position,
            )
            continue
        entities.append(entity)
    return tuple(entities)


def _normalize_metadata(raw: Mapping[str, Any]) -> JobMetadata:
    values: dict[str, Any] = {}
    for field_name, keys in _METADATA_KEYS.items():
        for key in keys:
            if raw.get(key) is not None:
                values[field_name] = raw[key]
                break

    # Numeric fields are dropped rather than trusted when they don't parse
    for field_name, cast in (("execution_count", int), ("success_rate", float)):
        if field_name in values:
            try:
                values[field_name] = cast(values[field_name])
            except (TypeError, ValueError):
                del values[field_name]
    for field_name in ("status", "owner", "last_updated"):
        if field_name in values:
            values[field_name] = str(values[field_name])

    return JobMetadata(**values)


def normalize_record(raw: Any) -> Optional[JobRecord]:
    """
    Normalize one job record.

    Args:
        raw: A JobRecord (returned as-is) or a mapping in the input shape

    Returns:
        JobRecord, or None if the record is malformed (no usable id)
    """
    if isinstance(raw, JobRecord):
        return raw
    if not isinstance(raw, Mapping):
        return None

    record_id = coerce_id(raw.get("id"))
    if record_id is None:
        return None

    return JobRecord(
        id=record_id,
        name=_coerce_name(raw.get("name")),
        inputs=_normalize_entities(raw.get("inputs"), record_id, "inputs"),
        outputs=_normalize_entities(raw.get("outputs"), record_id, "outputs"),
        metadata=_normalize_metadata(raw),
    )


def normalize_records(records: Optional[Iterable[Any]]) -> tuple[list[JobRecord], int]:
    """
    Normalize a collection of job records, skipping malformed ones.

    Args:
        records: Any iterable of record-like values; None is treated as empty

    Returns:
        Tuple of (normalized records in input order, number skipped)
    """
    normalized: list[JobRecord] = []
    skipped = 0

    for position, raw in enumerate(records or ()):
        record = normalize_record(raw)
        if record is None:
            logger.warning("Skipping malformed job record at position %d", position)
            skipped += 1
            continue
        normalized.append(record)

    return normalized, skipped


def load_records(path: Path | str) -> list[Mapping[str, Any]]:
    """
    Load raw job records from a JSON file.

    The file holds either a list of records or an object with a
    "records" list (the shape the CLI saves API responses in).

    Args:
        path: Path to the JSON file

    Returns:
        The raw record list, not yet normalized

    Raises:
        RecordLoadError: If the file is missing, unreadable, not JSON, or
            not one of the accepted shapes
    """
    path = Path(path)

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise RecordLoadError(f"Record file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise RecordLoadError(f"Cannot read record file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise RecordLoadError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(payload, Mapping):
        payload = payload.get("records")
    if not isinstance(payload, list):
        raise RecordLoadError(
            f"Expected a JSON list of job records (or {{'records': [...]}}) in {path}"
        )

    logger.info("Loaded %d raw job records from %s", len(payload), path)
    return payload
