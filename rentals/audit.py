"""
Append-only audit trail stored in the document's ``logs`` array.
"""
import logging
import uuid
from typing import Iterable, List, Optional

from .dates import timestamp_now
from .models import Document, LogEntry

logger = logging.getLogger(__name__)


def record(
    document: Document,
    user_id: Optional[str],
    action: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    old_value: Optional[str] = None,
    new_value: Optional[str] = None,
) -> LogEntry:
    """Prepend a new entry so ``document.logs`` stays newest first."""
    entry = LogEntry(
        id=str(uuid.uuid4()),
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        old_value=old_value or None,
        new_value=new_value or None,
        timestamp=timestamp_now(),
    )
    document.logs.insert(0, entry)
    logger.info("%s", format_log_message(action, entity_type, old_value, new_value))
    return entry


def newest_first(entries: Iterable[LogEntry]) -> List[LogEntry]:
    return sorted(entries, key=lambda e: e.timestamp, reverse=True)


def filter_logs(
    entries: Iterable[LogEntry],
    entity_type: Optional[str] = None,
    search: Optional[str] = None,
) -> List[LogEntry]:
    result = newest_first(entries)
    if entity_type:
        result = [e for e in result if e.entity_type.lower() == entity_type.lower()]
    if search:
        term = search.lower()
        result = [
            e for e in result
            if term in e.action.lower()
            or (e.old_value and term in e.old_value.lower())
            or (e.new_value and term in e.new_value.lower())
        ]
    return result


def format_log_message(
    action: str,
    entity_type: str,
    old_value: Optional[str] = None,
    new_value: Optional[str] = None,
) -> str:
    if old_value and new_value:
        return f'{action} of {entity_type}: "{old_value}" -> "{new_value}"'
    if new_value:
        return f'{action} {entity_type}: "{new_value}"'
    return f"{action} {entity_type}"
