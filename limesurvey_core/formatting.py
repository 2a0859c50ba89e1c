# =============================================================================
# limesurvey_core/formatting.py  —  Turning raw API results into summaries
# =============================================================================
#
# The gateway returns results untouched.  These pure helpers do the
# interpretation the tool adapters need:
#
#   - preview_export()            base64 export -> size + optional text preview
#   - find_surveys()              filter/sort the list_surveys result
#   - parse_available_languages() decode the JSON-string site setting
#   - survey_languages()          base + additional languages of a survey
#
# None of them touch the network, so they are tested directly.
# =============================================================================

import base64
import json
import logging
from typing import Any, Iterable, Optional

from limesurvey_core.models import ExportPreview

logger = logging.getLogger(__name__)

# Formats whose decoded bytes are readable text.  Everything else (pdf, xls,
# doc, ...) stays base64 and is only reported by size.
TEXT_FORMATS = frozenset({"csv", "json", "txt", "html"})
PREVIEW_LIMIT = 1000
TRUNCATED_MARKER = "\n...[truncated]"


def approx_size_kb(encoded: str) -> int:
    """Approximate decoded size in KB of a base64 string (4 chars -> 3 bytes)."""
    return int(len(encoded) * 0.75 / 1024 + 0.5)


def is_text_format(document_type: str) -> bool:
    return document_type.lower() in TEXT_FORMATS


def decode_base64_text(encoded: str) -> str:
    """Decode a base64 payload as UTF-8 text.

    Raises:
        ValueError: the payload is not valid base64 or not UTF-8.
    """
    compact = "".join(encoded.split())
    return base64.b64decode(compact, validate=True).decode("utf-8")


def preview_export(
    encoded: str,
    document_type: str,
    decode: bool = True,
    limit: int = PREVIEW_LIMIT,
) -> ExportPreview:
    """Describe a base64 export, decoding a preview for text formats.

    Args:
        encoded: The base64 string returned by an export procedure.
        document_type: Requested format (csv, json, pdf, ...).
        decode: When False, never decode, only report the size.
        limit: Maximum preview length in characters.

    Returns:
        An ExportPreview.  ``decoded`` is True only when a text preview was
        produced; ``error`` is set when decoding was attempted and failed.
    """
    size_kb = approx_size_kb(encoded)
    if not decode or not encoded or not is_text_format(document_type):
        return ExportPreview(size_kb=size_kb)

    try:
        text = decode_base64_text(encoded)
    except ValueError as exc:
        return ExportPreview(size_kb=size_kb, error=str(exc) or type(exc).__name__)

    preview = text
    if document_type.lower() == "json":
        try:
            preview = json.dumps(json.loads(text), indent=2)
        except ValueError:
            pass

    preview = preview[:limit]
    if len(text) > limit:
        preview += TRUNCATED_MARKER
    return ExportPreview(size_kb=size_kb, decoded=True, text=preview)


# -----------------------------------------------------------------------------
# Surveys
# -----------------------------------------------------------------------------
def _creation_date(survey: dict) -> str:
    value = survey.get("created") or survey.get("startdate") or survey.get("datecreated")
    return str(value) if value else "0"


def find_surveys(surveys: Iterable[dict], term: str, limit: Optional[int] = 10) -> list[dict]:
    """Match surveys by exact ID or case-insensitive title substring.

    Results are sorted newest first by the first available of ``created``,
    ``startdate`` and ``datecreated``.  A ``limit`` of None or <= 0 returns
    every match.
    """
    needle = term.lower()
    matches = [
        survey
        for survey in surveys
        if str(survey.get("sid", "")) == term
        or needle in str(survey.get("surveyls_title") or "").lower()
    ]
    matches.sort(key=_creation_date, reverse=True)
    if limit and limit > 0:
        return matches[:limit]
    return matches


def parse_available_languages(value: Any) -> list[str]:
    """Decode the ``availablelanguages`` site setting.

    LimeSurvey returns it as a JSON-encoded string array, either bare or
    inside a ``{"availablelanguages": ...}`` mapping.  Undecodable values
    are logged and yield an empty list.
    """
    if isinstance(value, dict):
        value = value.get("availablelanguages")
    if isinstance(value, list):
        return [str(lang) for lang in value]
    if not isinstance(value, str) or not value.strip():
        return []

    try:
        decoded = json.loads(value)
    except ValueError:
        logger.error("Failed to parse available languages: %r", value[:200])
        return []
    if not isinstance(decoded, list):
        logger.error("Available languages setting is not a list: %r", decoded)
        return []
    return [str(lang) for lang in decoded]


def survey_languages(properties: Any) -> list[str]:
    """Base language first, then the space-separated additional languages."""
    if not isinstance(properties, dict):
        return []
    languages: list[str] = []
    base = properties.get("language")
    if base:
        languages.append(str(base))
    for lang in str(properties.get("additional_languages") or "").split():
        if lang not in languages:
            languages.append(lang)
    return languages
