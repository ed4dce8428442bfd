from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    # The tool ran and reported a logical error inside a well-formed response
    TOOL_FAILURE = "failed"
    # The call itself could not complete (no session, broken channel)
    TRANSPORT_ERROR = "error"


class ContentKind(str, Enum):
    TEXT = "text"
    STRUCTURED_JSON = "json"
    IMAGE = "image"
    RAW = "raw"


@dataclass(frozen=True)
class InvocationOutcome:
    """
    Classified result of one tool call.

    `content_kind` tags the payload:
      - TEXT: `payload` is a str
      - STRUCTURED_JSON: `payload` is the parsed JSON value
      - IMAGE: `payload` is the encoded image data, `mime_type` is set
      - RAW: `payload` is the whole response object
    """
    status: OutcomeStatus
    content_kind: ContentKind
    payload: Any
    mime_type: Optional[str] = None

    def __post_init__(self):
        if self.content_kind == ContentKind.IMAGE and not self.mime_type:
            raise ValueError("Image outcomes require a mime type")
        if self.content_kind != ContentKind.IMAGE and self.mime_type is not None:
            raise ValueError("Only image outcomes carry a mime type")

    @classmethod
    def transport_error(cls, message: str) -> "InvocationOutcome":
        return cls(OutcomeStatus.TRANSPORT_ERROR, ContentKind.TEXT, message)

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status != OutcomeStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "status": self.status.value,
            "contentKind": self.content_kind.value,
            "payload": self.payload,
        }
        if self.mime_type:
            data["mimeType"] = self.mime_type
        return data

    def __repr__(self):
        preview = repr(self.payload)
        return (f"InvocationOutcome(status={self.status.value}, kind={self.content_kind.value}, "
                f"payload={preview[:50]}{'...' if len(preview) > 50 else ''})")
