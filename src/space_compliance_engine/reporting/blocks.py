"""Report model: metadata plus ordered sections of typed content blocks.

A Report is structured data only. External renderers (PDF, DOCX, HTML)
consume Report.to_dict() and decide layout; nothing here knows about fonts,
pages or colours.

Block types (discriminated on the `type` field):
- heading: section sub-heading with a level
- text: paragraph
- key_value: ordered key/value table
- list: ordered or bulleted list
- alert: info / warning / error callout
- table: header row plus rows; a row may nest a further table
- spacer: vertical gap hint
"""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ReportKind(StrEnum):
    """Report kinds, each with a fixed section order."""

    FRAMEWORK_ASSESSMENT = "framework_assessment"
    INCIDENT = "incident"
    ANNUAL_COMPLIANCE = "annual_compliance"
    SIGNIFICANT_CHANGE = "significant_change"
    UNIFIED_PROFILE = "unified_profile"


class _Block(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------


class HeadingBlock(_Block):
    """Sub-heading inside a section."""

    type: Literal["heading"] = "heading"
    value: str
    level: int = Field(default=3, ge=1, le=4)


class TextBlock(_Block):
    """Free-text paragraph."""

    type: Literal["text"] = "text"
    value: str


class KeyValueItem(_Block):
    key: str
    value: str


class KeyValueBlock(_Block):
    """Two-column key/value table, in insertion order."""

    type: Literal["key_value"] = "key_value"
    items: tuple[KeyValueItem, ...] = ()


class ListBlock(_Block):
    """Ordered or bulleted list of strings."""

    type: Literal["list"] = "list"
    items: tuple[str, ...] = ()
    ordered: bool = False


class AlertBlock(_Block):
    """Callout with a severity."""

    type: Literal["alert"] = "alert"
    severity: Literal["info", "warning", "error"] = "info"
    message: str


class TableRow(_Block):
    """One table row. nested renders as a sub-table under the row."""

    cells: tuple[str, ...]
    nested: "TableBlock | None" = None


class TableBlock(_Block):
    """Table with a header row."""

    type: Literal["table"] = "table"
    headers: tuple[str, ...]
    rows: tuple[TableRow, ...] = ()


class SpacerBlock(_Block):
    """Vertical spacing hint for renderers."""

    type: Literal["spacer"] = "spacer"
    height: int = Field(default=10, ge=0)


TableRow.model_rebuild()
TableBlock.model_rebuild()

Block = Annotated[
    HeadingBlock | TextBlock | KeyValueBlock | ListBlock | AlertBlock | TableBlock | SpacerBlock,
    Field(discriminator="type"),
]


def key_values(*pairs: tuple[str, Any]) -> KeyValueBlock:
    """Build a KeyValueBlock from (key, value) pairs, stringifying values."""
    return KeyValueBlock(items=tuple(KeyValueItem(key=key, value=str(value)) for key, value in pairs))


def bullet_list(items: Any, ordered: bool = False) -> ListBlock:
    return ListBlock(items=tuple(str(item) for item in items), ordered=ordered)


def table(headers: Any, rows: Any) -> TableBlock:
    """Build a flat TableBlock from header and row iterables."""
    return TableBlock(
        headers=tuple(str(header) for header in headers),
        rows=tuple(TableRow(cells=tuple(str(cell) for cell in row)) for row in rows),
    )


# ---------------------------------------------------------------------------
# Sections and reports
# ---------------------------------------------------------------------------


class Section(_Block):
    """A titled, ordered group of blocks.

    Attributes:
        key: Stable section identifier within the report kind.
        title: Display title, numbered by position once sections are ordered.
        blocks: Content blocks in display order.
    """

    key: str
    title: str
    blocks: tuple[Block, ...] = ()


class ReportMetadata(_Block):
    """Report identity.

    Attributes:
        report_id: Content-derived identifier; identical content yields the same id.
        report_kind: Kind of report.
        title: Report title.
        subject: Organisation or asset the report is about.
        generated_at: Generation timestamp; the only field that varies between
            runs over identical inputs.
    """

    report_id: str
    report_kind: ReportKind
    title: str
    subject: str
    generated_at: datetime


class Report(_Block):
    """Assembled report ready for an external renderer."""

    metadata: ReportMetadata
    sections: tuple[Section, ...] = ()

    @property
    def section_keys(self) -> list[str]:
        return [section.key for section in self.sections]

    def section(self, key: str) -> Section | None:
        """Return the section with the given key, if present."""
        for section in self.sections:
            if section.key == key:
                return section
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible structured data."""
        return self.model_dump(mode="json")
