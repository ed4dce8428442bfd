import json
from datetime import date, datetime
from typing import Any, Dict


def json_serializer_default(o: Any) -> Any:
    """Handles common non-serializable types for json.dumps."""
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    elif isinstance(o, set):
        return list(o)
    elif isinstance(o, bytes):
        try:
            return o.decode('utf-8')
        except UnicodeDecodeError:
            return repr(o)
    elif isinstance(o, BaseException):
        return error_to_dict(o)
    elif hasattr(o, 'model_dump') and callable(o.model_dump):  # Pydantic V2 (mcp.types)
        return o.model_dump(by_alias=True, exclude_none=True, mode="json")
    elif hasattr(o, 'to_dict') and callable(o.to_dict):
        return o.to_dict()
    elif hasattr(o, '__dict__'):
        return o.__dict__
    return repr(o)


def to_jsonable(value: Any) -> Any:
    """
    Convert a response object (pydantic model, dataclass-like, dict) into plain JSON data.
    """
    if hasattr(value, 'model_dump') and callable(value.model_dump):
        return value.model_dump(by_alias=True, exclude_none=True, mode="json")
    return value


def serialize_payload(value: Any) -> str:
    """Pretty JSON used as the `raw_data` of event log entries."""
    try:
        return json.dumps(to_jsonable(value), indent=2, default=json_serializer_default)
    except (TypeError, ValueError):
        return repr(value)


def error_to_dict(error: BaseException) -> Dict[str, Any]:
    data: Dict[str, Any] = {"type": type(error).__name__, "message": describe_error(error)}
    sub_errors = getattr(error, "exceptions", None)
    if isinstance(sub_errors, (list, tuple)) and sub_errors:
        data["exceptions"] = [error_to_dict(e) for e in sub_errors]
    return data


def serialize_error(error: BaseException) -> str:
    return json.dumps(error_to_dict(error), indent=2, default=json_serializer_default)


def describe_error(error: BaseException) -> str:
    """
    Short human message for an exception. Exception groups are flattened to their
    first leaf so the underlying cause is shown instead of "unhandled errors in a TaskGroup".
    """
    sub_errors = getattr(error, "exceptions", None)
    if isinstance(sub_errors, (list, tuple)) and sub_errors:
        return describe_error(sub_errors[0])
    message = str(error)
    return message if message else type(error).__name__
