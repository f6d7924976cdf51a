"""
Record parsing and hour-bucket derivation.

A hit is routed by its timestamp field, truncated to the hour in UTC,
and contributes one line: its message field.
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Tuple

from .exceptions import RecordFieldError
from .models import SearchHit


BUCKET_FORMAT = "%Y-%m-%d-%H"

# RFC 3339 / ISO-8601 date-time with optional fraction and offset.
# Fractions longer than microseconds (e.g. nanoseconds) are truncated.
_TIMESTAMP_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:[.,](?P<frac>\d+))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:?\d{2})?$"
)


def decode_source(hit: SearchHit) -> Dict[str, Any]:
    """
    Decode the raw payload of a hit into a mapping.
    
    Raises:
        RecordFieldError: If the payload is not a JSON object
    """
    source = hit.source
    if isinstance(source, Mapping):
        return dict(source)
    
    if not isinstance(source, (bytes, bytearray, str)):
        raise RecordFieldError(
            f"Document ID {hit.doc_id}: unsupported payload type {type(source).__name__}",
            doc_id=hit.doc_id,
        )
    
    try:
        decoded = json.loads(source)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RecordFieldError(
            f"Error unmarshaling document ID {hit.doc_id}: {e}",
            doc_id=hit.doc_id,
        ) from e
    
    if not isinstance(decoded, dict):
        raise RecordFieldError(
            f"Document ID {hit.doc_id}: payload is not a JSON object",
            doc_id=hit.doc_id,
        )
    return decoded


def get_string_field(document: Mapping[str, Any], field_name: str, doc_id: str) -> str:
    """
    Return a top-level string field of a decoded document.
    
    Raises:
        RecordFieldError: If the field is absent or not a string
    """
    value = document.get(field_name)
    if not isinstance(value, str):
        raise RecordFieldError(
            f"Document ID {doc_id}: '{field_name}' field is not a string",
            doc_id=doc_id,
            field=field_name,
        )
    return value


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 / RFC 3339 timestamp into an aware datetime.
    
    Timestamps without an offset are taken as UTC.
    
    Raises:
        ValueError: If the string is not a valid timestamp
    """
    match = _TIMESTAMP_RE.match(value.strip())
    if not match:
        raise ValueError(f"invalid timestamp: {value!r}")
    
    normalized = match.group("base").replace("t", "T").replace(" ", "T")
    
    frac = match.group("frac")
    if frac:
        normalized += "." + frac[:6].ljust(6, "0")
    
    tz = match.group("tz")
    if tz is None or tz in ("Z", "z"):
        normalized += "+00:00"
    elif ":" not in tz:
        normalized += f"{tz[:3]}:{tz[3:]}"
    else:
        normalized += tz
    
    return datetime.fromisoformat(normalized)


def hour_bucket(instant: datetime) -> str:
    """
    Truncate an instant to the hour, formatted as YYYY-MM-DD-HH.
    
    The hour is taken in the offset the timestamp was written with;
    naive instants are read as UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.strftime(BUCKET_FORMAT)


def route_hit(hit: SearchHit, timestamp_field: str, message_field: str) -> Tuple[str, str]:
    """
    Resolve the hour bucket and output line for a hit.
    
    Returns:
        Tuple of (bucket, message)
        
    Raises:
        RecordFieldError: If the hit cannot be routed
    """
    document = decode_source(hit)
    
    raw_timestamp = get_string_field(document, timestamp_field, hit.doc_id)
    try:
        instant = parse_timestamp(raw_timestamp)
    except ValueError as e:
        raise RecordFieldError(
            f"Error parsing timestamp for document ID {hit.doc_id}: {e}",
            doc_id=hit.doc_id,
            field=timestamp_field,
        ) from e
    bucket = hour_bucket(instant)
    
    message = get_string_field(document, message_field, hit.doc_id)
    return bucket, message
