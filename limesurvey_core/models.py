# =============================================================================
# limesurvey_core/models.py  —  Data Models (the "nouns" of the gateway)
# =============================================================================
#
# These dataclasses define the shape of everything that crosses the wire:
# the JSON-RPC request, the response envelope, the session-key state the
# gateway owns, and the typed records adapters build before calling it.
#
# The fixed vocabularies of the RemoteControl API (completion status,
# heading type, ...) are Literal aliases.  The tool layer uses the same
# aliases in its signatures, so the MCP input schema lists them as enums.
# =============================================================================

import asyncio
from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Union


# -----------------------------------------------------------------------------
# Positional argument values
# -----------------------------------------------------------------------------
# Every RemoteControl argument is one of these JSON-encodable values.  An
# optional argument with no value is sent as None (JSON null) in its slot.
# -----------------------------------------------------------------------------
RpcValue = Union[str, int, float, bool, None, list, dict]


# -----------------------------------------------------------------------------
# Fixed vocabularies
# -----------------------------------------------------------------------------
CompletionStatus = Literal["complete", "incomplete", "all"]
HeadingType = Literal["code", "full", "abbreviated"]
ResponseType = Literal["short", "long"]
StatisticsFormat = Literal["pdf", "xls", "html"]
ResponseStatus = Literal["complete", "incomplete", "deleted"]


# -----------------------------------------------------------------------------
# RpcRequest / RpcResponse — the wire envelope
# -----------------------------------------------------------------------------
@dataclass
class RpcRequest:
    """One outbound RemoteControl call."""

    method: str
    params: list[RpcValue]
    id: int

    def to_payload(self) -> dict:
        return {"method": self.method, "params": self.params, "id": self.id}


@dataclass
class RpcResponse:
    """Decoded ``{id, result?, error?}`` envelope.

    ``result`` may legitimately be None, an empty list or an empty dict;
    only a truthy ``error`` marks a failure.
    """

    id: Optional[int] = None
    result: Any = None
    error: Any = None

    @classmethod
    def from_payload(cls, payload: dict) -> "RpcResponse":
        return cls(
            id=payload.get("id"),
            result=payload.get("result"),
            error=payload.get("error"),
        )

    @property
    def is_error(self) -> bool:
        return bool(self.error)


# -----------------------------------------------------------------------------
# SessionKeyState — the gateway's only mutable state
# -----------------------------------------------------------------------------
# ``key`` is the cached session key.  ``pending`` is the authentication task
# currently in flight, shared by every caller that finds no cached key while
# it runs.
# -----------------------------------------------------------------------------
@dataclass
class SessionKeyState:
    key: Optional[str] = None
    pending: Optional["asyncio.Task[str]"] = None

    def clear(self) -> None:
        self.key = None


# -----------------------------------------------------------------------------
# Participant — one survey participant (token table row)
# -----------------------------------------------------------------------------
@dataclass
class Participant:
    """A participant as accepted by ``add_participants``.

    Field names follow the LimeSurvey token table columns.  Unset fields are
    left out of the payload so LimeSurvey applies its own defaults.
    """

    email: str
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    language: Optional[str] = None
    usesleft: Optional[int] = None
    validfrom: Optional[str] = None       # "YYYY-MM-DD HH:MM:SS"
    validuntil: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)  # attribute_1, ...

    def to_params(self) -> dict:
        data = {
            "email": self.email,
            "firstname": self.firstname,
            "lastname": self.lastname,
            "language": self.language,
            "usesleft": self.usesleft,
            "validfrom": self.validfrom,
            "validuntil": self.validuntil,
        }
        data = {k: v for k, v in data.items() if v is not None}
        data.update(self.attributes)
        return data


# -----------------------------------------------------------------------------
# ExportPreview — what an adapter can say about a base64 export
# -----------------------------------------------------------------------------
@dataclass
class ExportPreview:
    size_kb: int
    decoded: bool = False
    text: Optional[str] = None        # preview of the decoded payload
    error: Optional[str] = None       # set when decoding was attempted and failed
