# =============================================================================
# limesurvey_tools/statistics.py  —  Survey statistics export
# =============================================================================
#
# export_statistics returns a base64 document in PDF, Excel or HTML form.
# HTML gets a short decoded preview; PDF and XLS are only reported by size.
# =============================================================================

from typing import Annotated, Optional

from pydantic import Field

from limesurvey_core.formatting import approx_size_kb, decode_base64_text
from limesurvey_core.models import StatisticsFormat
from limesurvey_tools.envelope import ToolResponse
from limesurvey_tools.params import blank_to_none
from limesurvey_tools.registry import ToolGroup, tool

HTML_PREVIEW_CHARS = 300


class StatisticsTools(ToolGroup):

    @tool(
        "export_statistics",
        "Exports survey statistics in PDF, Excel, or HTML format with optional graphs",
    )
    async def export_statistics(
        self,
        survey_id: Annotated[
            str, Field(description="The ID of the survey to export statistics for")
        ],
        document_type: Annotated[
            StatisticsFormat, Field(description="Format of the export: 'pdf', 'xls', or 'html'")
        ] = "pdf",
        language: Annotated[
            Optional[str],
            Field(description="Optional: Language for statistics export (default: survey's default language)"),
        ] = None,
        include_graphs: Annotated[
            bool, Field(description="Whether to include graphs in the export (only applicable for PDF)")
        ] = False,
        group_ids: Annotated[
            Optional[list[int]],
            Field(description="Optional: Question group IDs to limit the statistics to"),
        ] = None,
    ) -> ToolResponse:
        """Export statistics and describe the generated document.

        Args:
            survey_id: Survey to export statistics for.
            document_type: "pdf", "xls" or "html".
            language: Export language; None means the base language.
            include_graphs: Sent to LimeSurvey as the string "1" or "0".
            group_ids: Restrict the statistics to these question groups.

        Returns:
            Summary line, then the approximate size.  HTML exports also get
            the first 300 decoded characters.
        """
        try:
            data = await self.gateway.export_statistics(
                survey_id,
                document_type,
                blank_to_none(language),
                "1" if include_graphs else "0",
                blank_to_none(group_ids),
            )
        except Exception as exc:
            return ToolResponse.failure("Error exporting statistics", exc)

        if not isinstance(data, str):
            return ToolResponse.ok(f"Statistics export for survey ID {survey_id} returned no file", data)

        if document_type == "html":
            try:
                html = decode_base64_text(data)
                preview = f"\nHTML Preview (first {HTML_PREVIEW_CHARS} characters):\n{html[:HTML_PREVIEW_CHARS]}..."
            except ValueError:
                preview = "\nUnable to generate HTML preview."
        else:
            preview = f"\nThe {document_type.upper()} file was successfully generated."

        graphs = " with graphs" if include_graphs else ""
        return ToolResponse.text(
            f"Statistics for survey ID {survey_id} exported successfully as {document_type.upper()}{graphs}.",
            f"The exported statistics file is base64 encoded and has a size of approximately "
            f"{approx_size_kb(data)} KB.{preview}",
        )
