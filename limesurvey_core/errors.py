# =============================================================================
# limesurvey_core/errors.py  —  Error taxonomy for the RemoteControl gateway
# =============================================================================
#
# Every failure the gateway can produce is one of four types, all sharing
# the LimeSurveyError base so callers can catch "anything LimeSurvey" in one
# clause:
#
#   ConfigurationError    credentials missing / bad setting value
#   AuthenticationError   get_session_key answered with no usable key
#   TransportError        the HTTP round-trip itself failed
#   RemoteProcedureError  LimeSurvey answered, but with an "error" field
#
# Only the tool adapters turn these into user-visible error responses.
# =============================================================================

import json
from typing import Any, Optional


class LimeSurveyError(Exception):
    """Base class for every error raised by the gateway."""


class ConfigurationError(LimeSurveyError):
    """A required setting (usually a credential) is missing or invalid."""


class AuthenticationError(LimeSurveyError):
    """The session key request returned an empty or non-string value."""


class TransportError(LimeSurveyError):
    """The request never produced a usable JSON-RPC envelope.

    ``cause`` holds the underlying httpx (or decoding) exception; it is also
    chained as ``__cause__`` by the gateway.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class RemoteProcedureError(LimeSurveyError):
    """LimeSurvey flagged a domain-level error for ``method``.

    The payload is kept verbatim: either a plain string such as
    ``"Invalid session key"`` or a ``{"code": ..., "message": ...}`` mapping.
    """

    def __init__(self, payload: Any, method: Optional[str] = None):
        self.payload = payload
        self.method = method
        self.code = payload.get("code") if isinstance(payload, dict) else None
        super().__init__(f"LimeSurvey API error: {_describe(payload)}")


def _describe(payload: Any) -> str:
    if isinstance(payload, str):
        return payload
    try:
        return json.dumps(payload)
    except (TypeError, ValueError):
        return repr(payload)
