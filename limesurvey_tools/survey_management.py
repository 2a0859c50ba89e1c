# =============================================================================
# limesurvey_tools/survey_management.py  —  Whole-survey lifecycle tools
# =============================================================================
#
#   import_survey                 (mutating) create a survey from an .lss file
#   export_survey                 structure export, reported by size only
#   copy_survey                   (mutating) duplicate a survey
#   delete_survey                 (mutating, irreversible) needs confirmation
#   get_questionnaire_definition  full structure as JSON
# =============================================================================

from typing import Annotated, Optional

from pydantic import Field

from limesurvey_core.formatting import approx_size_kb
from limesurvey_tools.envelope import ToolResponse
from limesurvey_tools.params import ConfirmDeletion, SurveyId, blank_to_none
from limesurvey_tools.registry import ToolGroup, tool


class SurveyManagementTools(ToolGroup):

    @tool(
        "import_survey",
        "Imports a survey from a base64 encoded .lss file",
        read_only=False,
    )
    async def import_survey(
        self,
        survey_file: Annotated[
            str,
            Field(description="Base64 encoded string containing the survey structure (.lss file)"),
        ],
        survey_name: Annotated[
            Optional[str], Field(description="Optional: The name to use for the survey after import")
        ] = None,
        import_type: Annotated[
            str, Field(description="Format of the import file: 'lss', 'csv', 'txt' or 'lsa'")
        ] = "lss",
        destination_survey_id: Annotated[
            Optional[int], Field(description="Optional: The ID the new survey should get")
        ] = None,
    ) -> ToolResponse:
        """Create a survey from an exported structure file.

        Args:
            survey_file: Base64 content of the .lss (or csv/txt/lsa) file.
            survey_name: Title for the new survey; None keeps the file's title.
            import_type: File format, "lss" by default.
            destination_survey_id: Requested ID for the new survey.

        Returns:
            One line with the new survey's ID.
        """
        try:
            result = await self.gateway.import_survey(
                survey_file, import_type, blank_to_none(survey_name), destination_survey_id
            )
        except Exception as exc:
            return ToolResponse.failure("Error importing survey", exc)
        return ToolResponse.text(f"Survey imported successfully with ID: {result}")

    @tool("export_survey", "Exports a survey structure as a base64 encoded .lss file")
    async def export_survey(
        self,
        survey_id: Annotated[str, Field(description="The ID of the survey to export")],
    ) -> ToolResponse:
        try:
            result = await self.gateway.export_survey(survey_id)
        except Exception as exc:
            return ToolResponse.failure("Error exporting survey", exc)

        if not isinstance(result, str):
            return ToolResponse.ok(f"Export of survey {survey_id} returned no file", result)
        return ToolResponse.text(
            f"Survey {survey_id} exported successfully. The exported .lss file is base64 "
            f"encoded and has a size of approximately {approx_size_kb(result)} KB."
        )

    @tool("copy_survey", "Creates a copy of an existing survey", read_only=False)
    async def copy_survey(
        self,
        survey_id: Annotated[str, Field(description="The ID of the survey to copy")],
        new_name: Annotated[
            Optional[str],
            Field(description="Optional: The name of the new survey (leave empty to use original name)"),
        ] = None,
    ) -> ToolResponse:
        """Copy a survey; the new survey ID is read from ``newsid`` when present."""
        try:
            result = await self.gateway.copy_survey(survey_id, blank_to_none(new_name))
        except Exception as exc:
            return ToolResponse.failure("Error copying survey", exc)

        if isinstance(result, dict) and "newsid" in result:
            return ToolResponse.text(
                f"Survey {survey_id} copied successfully. New survey ID: {result['newsid']}"
            )
        return ToolResponse.ok(f"Survey {survey_id} copied successfully. New survey ID: {result}")

    @tool(
        "delete_survey",
        "Permanently deletes a survey and all its data",
        read_only=False,
        destructive=True,
    )
    async def delete_survey(
        self,
        survey_id: Annotated[str, Field(description="The ID of the survey to delete")],
        confirm_deletion: ConfirmDeletion = False,
    ) -> ToolResponse:
        if confirm_deletion is not True:
            return ToolResponse.error("You must confirm deletion by setting confirm_deletion to true")
        try:
            result = await self.gateway.delete_survey(survey_id)
        except Exception as exc:
            return ToolResponse.failure("Error deleting survey", exc)
        return ToolResponse.ok(f"Survey {survey_id} deleted successfully", result)

    @tool(
        "get_questionnaire_definition",
        "Gets a complete questionnaire definition for a survey in JSON format",
    )
    async def get_questionnaire_definition(
        self,
        survey_id: SurveyId,
        language: Annotated[
            Optional[str],
            Field(description="Optional: Language code (if omitted, uses the base language)"),
        ] = None,
        include_tokens: Annotated[bool, Field(description="Whether to include tokens")] = False,
    ) -> ToolResponse:
        try:
            result = await self.gateway.get_questionnaire_definition(
                survey_id, blank_to_none(language), include_tokens
            )
        except Exception as exc:
            return ToolResponse.failure("Error retrieving questionnaire definition", exc)
        return ToolResponse.ok(
            f"Questionnaire definition for survey {survey_id} retrieved successfully", result
        )
