# =============================================================================
# limesurvey_tools/params.py  —  Parameter types shared by the adapters
# =============================================================================
#
# FastMCP builds each tool's input schema from the adapter signature, so the
# descriptions clients see live in these Annotated[..., Field(...)] aliases.
# =============================================================================

from typing import Annotated, Any, Optional

from pydantic import Field

SurveyId = Annotated[str, Field(description="The ID of the survey")]
Language = Annotated[
    Optional[str], Field(description="Optional: Language code (default: the survey's base language)")
]
SettingNames = Annotated[
    Optional[list[str]], Field(description="Optional: Names of the properties to retrieve (default: all)")
]
ConfirmDeletion = Annotated[
    bool, Field(description="Confirmation that you want to delete (must be true)")
]


def blank_to_none(value: Any) -> Any:
    """Normalize an omitted optional argument to None.

    Empty strings and empty lists count as "no value"; LimeSurvey receives
    an explicit null in that argument's position.
    """
    if value is None or value == "" or value == []:
        return None
    return value
