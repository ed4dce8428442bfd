"""
Response classifier: maps a raw tools/call response onto an :class:`InvocationOutcome`.

Servers signal a logical failure in different ways, so the checks are layered:
  1. an explicit `isError: true` on the response always means TOOL_FAILURE
  2. the first content entry decides the content kind; JSON text whose `status`
     is "error", or plain text starting with the word "error", is a TOOL_FAILURE
  3. a response without content but with a top-level `status: "error"` is a RAW failure
  4. anything else is a RAW success
"""
import json
import re
from typing import Any, Dict, Optional, Tuple

from mcpdesk.models.outcome import ContentKind, InvocationOutcome, OutcomeStatus
from mcpdesk.utils.helpers import to_jsonable

LEADING_ERROR_WORD = re.compile(r"\s*error\b", re.IGNORECASE)


def classify_response(raw: Any) -> InvocationOutcome:
    data = to_jsonable(raw)
    flagged = isinstance(data, dict) and data.get("isError") is True

    failed, kind, payload, mime_type = _classify_content(data)
    status = OutcomeStatus.TOOL_FAILURE if (flagged or failed) else OutcomeStatus.SUCCESS
    return InvocationOutcome(status, kind, payload, mime_type)


def _classify_content(data: Any) -> Tuple[bool, ContentKind, Any, Optional[str]]:
    first = _first_content_entry(data)
    if first is not None:
        if _is_image(first):
            return False, ContentKind.IMAGE, first["data"], first["mimeType"]
        text = first.get("text")
        if first.get("type", "text") == "text" and isinstance(text, str):
            try:
                parsed = json.loads(text)
            except ValueError:
                return bool(LEADING_ERROR_WORD.match(text)), ContentKind.TEXT, text, None
            return _has_error_status(parsed), ContentKind.STRUCTURED_JSON, parsed, None
        return False, ContentKind.RAW, data, None

    return _has_error_status(data), ContentKind.RAW, data, None


def _first_content_entry(data: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(data, dict):
        return None
    content = data.get("content")
    if isinstance(content, list) and content and isinstance(content[0], dict):
        return content[0]
    return None


def _is_image(entry: Dict[str, Any]) -> bool:
    return (entry.get("type") == "image"
            and isinstance(entry.get("data"), str)
            and bool(entry.get("mimeType")))


def _has_error_status(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    status = value.get("status")
    return isinstance(status, str) and status.lower() == "error"
