# =============================================================================
# limesurvey_tools/envelope.py  —  The response every tool returns
# =============================================================================
#
# Every adapter returns a ToolResponse: an ordered list of text items plus
# an error flag.  Adapters never raise; a failure is a ToolResponse with
# is_error=True whose single item carries the message.
#
#   ToolResponse.ok(summary, result)     summary line + pretty JSON of result
#   ToolResponse.text(*items)            plain text items
#   ToolResponse.failure(prefix, exc)    "<prefix>: <message>" error
#   ToolResponse.error(message)          error without an exception
# =============================================================================

import json
from dataclasses import dataclass, field
from typing import Any

UNKNOWN_ERROR = "Unknown error"

_MISSING = object()


def to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


@dataclass
class ToolResponse:
    content: list[str] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def ok(cls, summary: str, result: Any = _MISSING) -> "ToolResponse":
        """Summary line, followed by the JSON of ``result`` unless it is None."""
        items = [summary]
        if result is not _MISSING and result is not None:
            items.append(to_json(result))
        return cls(content=items)

    @classmethod
    def text(cls, *items: str) -> "ToolResponse":
        return cls(content=list(items))

    @classmethod
    def error(cls, message: str) -> "ToolResponse":
        return cls(content=[message], is_error=True)

    @classmethod
    def failure(cls, prefix: str, exc: BaseException) -> "ToolResponse":
        message = str(exc) or UNKNOWN_ERROR
        return cls.error(f"{prefix}: {message}")

    @property
    def message(self) -> str:
        return "\n\n".join(self.content)
