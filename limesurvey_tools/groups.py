# =============================================================================
# limesurvey_tools/groups.py  —  Question group structure import/export
# =============================================================================
#
#   import_question_group   (mutating) add a group from an .lsg file
#   export_question_group   group structure, reported by size only
# =============================================================================

from typing import Annotated, Optional

from pydantic import Field

from limesurvey_core.formatting import approx_size_kb
from limesurvey_tools.envelope import ToolResponse
from limesurvey_tools.params import SurveyId, blank_to_none
from limesurvey_tools.registry import ToolGroup, tool


class GroupTools(ToolGroup):

    @tool(
        "import_question_group",
        "Imports a question group from a base64 encoded structure file",
        read_only=False,
    )
    async def import_question_group(
        self,
        survey_id: Annotated[str, Field(description="The ID of the survey to import the group into")],
        import_data: Annotated[
            str, Field(description="Base64 encoded string containing the question group structure")
        ],
        import_type: Annotated[
            str, Field(description="Format of the import data: 'lsg' or 'csv'")
        ] = "lsg",
        new_name: Annotated[
            Optional[str], Field(description="Optional: New name for the imported group")
        ] = None,
        new_description: Annotated[
            Optional[str], Field(description="Optional: New description for the imported group")
        ] = None,
    ) -> ToolResponse:
        """Import an .lsg (or csv) group into an existing survey, optionally renaming it."""
        try:
            result = await self.gateway.import_group(
                survey_id,
                import_data,
                import_type,
                blank_to_none(new_name),
                blank_to_none(new_description),
            )
        except Exception as exc:
            return ToolResponse.failure("Error importing question group", exc)
        return ToolResponse.ok("Question group imported successfully", result)

    @tool(
        "export_question_group",
        "Exports a question group as a base64 encoded structure file",
    )
    async def export_question_group(
        self,
        survey_id: SurveyId,
        group_id: Annotated[str, Field(description="The ID of the question group to export")],
    ) -> ToolResponse:
        """Export a group's structure; only its approximate size is reported."""
        try:
            result = await self.gateway.export_group(survey_id, group_id)
        except Exception as exc:
            return ToolResponse.failure("Error exporting question group", exc)

        if not isinstance(result, str):
            return ToolResponse.ok(f"Export of question group {group_id} returned no file", result)
        return ToolResponse.text(
            f"Question group {group_id} from survey {survey_id} exported successfully. "
            f"The exported file is base64 encoded and has a size of approximately "
            f"{approx_size_kb(result)} KB."
        )
