"""
Utility functions for the secretcli package.
"""
import json
from typing import Any, Iterator, Optional

from pydantic import BaseModel

from .exceptions import MessageSerializationError
from .models import Attribute, TxQuery

FAILED_EXECUTION_MARKER = "failed to execute message"


def serialize_message(message: Any) -> str:
    """
    Serialize a contract message to compact JSON.

    Args:
        message: A pydantic model or any JSON-serializable value

    Returns:
        JSON string without insignificant whitespace

    Raises:
        MessageSerializationError: If the message cannot be serialized
    """
    if isinstance(message, BaseModel):
        message = message.model_dump(mode="json", by_alias=True, exclude_none=True)
    try:
        return json.dumps(message, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise MessageSerializationError(f"Cannot serialize message to JSON: {e}") from e


def _scanned_attributes(query: TxQuery, scan: str) -> Iterator[Attribute]:
    if scan == "all":
        for log in query.logs:
            for event in log.events:
                yield from event.attributes
        return

    # Legacy behaviour: only the first event of the first log is inspected
    if query.logs and query.logs[0].events:
        yield from query.logs[0].events[0].attributes


def find_attribute(query: TxQuery, key: str, scan: str = "first_event") -> Optional[str]:
    """
    Find the value of the first event attribute named ``key``.

    Args:
        query: Transaction query result
        key: Attribute key to look for (e.g. "code_id")
        scan: "first_event" to read only ``logs[0].events[0]``,
            "all" to scan every log and event in order

    Returns:
        The first matching value, or None if no attribute matched
    """
    for attribute in _scanned_attributes(query, scan):
        if attribute.msg_key == key:
            return attribute.value
    return None


def trim_newline(value: str) -> str:
    """Strip one trailing newline and the carriage return before it"""
    if value.endswith("\n"):
        value = value[:-1]
        if value.endswith("\r"):
            value = value[:-1]
    return value


def execution_failed(query: TxQuery) -> bool:
    """True if the raw log reports a contract execution failure"""
    return FAILED_EXECUTION_MARKER in query.raw_log
