"""Response schemas for transcription tools."""

from pydantic import BaseModel, Field

from mazatec_tei_mcp.schemas.transcription.records import TranscriptionEntry


class EntrySummary(BaseModel):
    """One-line overview of an entry."""

    id: str = Field(description="Entry ID - use this EXACT value to address the entry")
    position: int = Field(description="1-based position in document order")
    page: str = Field(description="Page/folio identifier")
    column: str = Field(description="Column (1, 2 or across)")
    line: str = Field(description="Line number")
    maz_orig: str = Field(description="Original Mazatec orthography")
    spa_orig: str = Field(description="Original Spanish gloss")
    eng_gloss: str = Field(description="English gloss")
    note_count: int = Field(default=0, description="Number of notes")

    @classmethod
    def from_entry(cls, entry: TranscriptionEntry, position: int) -> "EntrySummary":
        return cls(
            id=entry.id,
            position=position,
            page=entry.page,
            column=entry.column.value,
            line=entry.line,
            maz_orig=entry.maz_orig,
            spa_orig=entry.spa_orig,
            eng_gloss=entry.eng_gloss,
            note_count=len(entry.notes),
        )


class DocumentStatus(BaseModel):
    """Overview of the current transcription."""

    title: str = Field(description="Main title")
    entry_count: int = Field(description="Number of entries")
    pages: list[str] = Field(
        default_factory=list, description="Pages in order of first appearance"
    )
    storage_path: str = Field(description="Where the state is persisted")
    export_filename: str = Field(description="Filename a TEI export would get")


class ExportResult(BaseModel):
    """Result of writing an export file."""

    path: str = Field(description="Written file path")
    format: str = Field(description="Export format (tei or flat)")
    entry_count: int = Field(description="Number of exported entries")
    size_bytes: int = Field(description="File size in bytes")


class ImportResult(BaseModel):
    """Result of importing a TEI document."""

    title: str = Field(description="Imported main title")
    entry_count: int = Field(description="Number of imported entries")
    entries: list[EntrySummary] = Field(
        default_factory=list, description="Imported entries"
    )
