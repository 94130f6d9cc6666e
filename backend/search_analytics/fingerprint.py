"""Order-independent digest of a job-record set, used as a prediction cache key."""
from datetime import date, datetime
from typing import Any, Iterable

from search_analytics.records import JobRecord

FINGERPRINT_VERSION = "v1"
EMPTY_FINGERPRINT = "no-jobs"
_FIELD_SEP = "|"
_RECORD_SEP = "\n"


def _field(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _record_line(record: JobRecord) -> str:
    return _FIELD_SEP.join((
        _field(record.id),
        _field(record.status),
        _field(record.status_changed_at),
        _field(record.created_at),
    ))


def djb2_xor(text: str) -> int:
    """DJB2 variant (hash * 33 ^ char) folded to 32 bits."""
    h = 5381
    for ch in text:
        h = ((h * 33) ^ ord(ch)) & 0xFFFFFFFF
    return h


def compute_fingerprint(records: Iterable[JobRecord]) -> str:
    """Stable key for a record multiset.

    Lines are sorted before hashing so input order never matters; any change to
    id, status or either timestamp changes the digest. Not cryptographic.
    """
    lines = sorted(_record_line(r) for r in records)
    if not lines:
        return EMPTY_FINGERPRINT
    return f"{FINGERPRINT_VERSION}_{djb2_xor(_RECORD_SEP.join(lines)):08x}"
