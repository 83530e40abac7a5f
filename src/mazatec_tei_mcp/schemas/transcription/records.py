"""Transcription record schemas.

These schemas represent the in-memory state of a transcription: one flat
metadata record and an ordered list of entries, each entry being one
transcribed manuscript line or lexical item.

All models are frozen. Mutations build new instances (see
``servers.transcription.utils.records``).
"""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mazatec_tei_mcp.utils.tei import xml_safe


def new_id() -> str:
    """Process-local identifier used for addressing records. Never serialized to TEI."""
    return uuid4().hex


class Layout(str, Enum):
    """Physical column an entry belongs to on the source page."""

    COLUMN_1 = "1"
    COLUMN_2 = "2"
    ACROSS = "across"


# Order in which layout groups appear in the TEI body
LAYOUT_ORDER = (Layout.ACROSS, Layout.COLUMN_1, Layout.COLUMN_2)


class NoteType(str, Enum):
    """Note vocabulary, mirrored in the TEI taxonomy."""

    EDITORIAL = "editorial"
    LINGUISTIC = "linguistic"
    LAYOUT = "layout"
    ORTHOGRAPHIC = "orthographic"
    HISTORICAL = "historical"
    SEMANTIC = "semantic"


NOTE_TYPE_DESCRIPTIONS: dict[NoteType, str] = {
    NoteType.EDITORIAL: "Transcription decisions",
    NoteType.LINGUISTIC: "Comparative/reconstructed",
    NoteType.LAYOUT: "Physical arrangement",
    NoteType.ORTHOGRAPHIC: "Spelling/graphemes",
    NoteType.HISTORICAL: "Contextual info",
    NoteType.SEMANTIC: "Meaning clarifications",
}

# Selecting this type removes the note instead of storing it
NOTE_DELETE_SENTINEL = "none"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _xml_safe_strings(cls, value: object) -> object:
        # Every text field ends up in an XML document
        return xml_safe(value) if isinstance(value, str) else value


class Note(_Record):
    """Free-text annotation attached to an entry."""

    id: str = Field(default_factory=new_id, description="Process-local ID")
    type: NoteType = Field(default=NoteType.EDITORIAL, description="Note type")
    resp: str = Field(default="", description="Responsibility code of the annotator")
    text: str = Field(default="", description="Note text")


class VariantForm(_Record):
    """Alternate attested spelling or reading of an entry."""

    id: str = Field(default_factory=new_id, description="Process-local ID")
    abbr: str = Field(default="", description="Abbreviation label of the variant")
    maz_orig: str = Field(default="", description="Original orthography")
    maz_norm: str = Field(default="", description="Normalized orthography")

    @property
    def is_empty(self) -> bool:
        return not (self.abbr or self.maz_orig or self.maz_norm)


class DaughterWord(_Record):
    """Attested daughter-language reflex of a reconstructed proto-form."""

    id: str = Field(default_factory=new_id, description="Process-local ID")
    text: str = Field(default="", description="Attested form")
    confirms: bool = Field(
        default=False, description="Whether the form confirms the reconstruction"
    )


class KirkSet(_Record):
    """Comparative set: a reconstructed proto-form and its daughter words."""

    id: str = Field(default_factory=new_id, description="Process-local ID")
    set_number: str = Field(default="", description="Set number")
    source_page: str = Field(default="", description="Page in the comparative source")
    headword: str = Field(default="", description="Reconstructed headword")
    daughters: list[DaughterWord] = Field(
        default_factory=list, description="Daughter words, in order"
    )

    @property
    def is_empty(self) -> bool:
        return not (
            self.set_number
            or self.source_page
            or self.headword
            or any(d.text for d in self.daughters)
        )


class TranscriptionEntry(_Record):
    """One transcribed manuscript line or lexical item."""

    id: str = Field(default_factory=new_id, description="Process-local ID")

    # Position
    page: str = Field(default="", description="Page/folio identifier")
    column: Layout = Field(default=Layout.COLUMN_1, description="Column or across")
    line: str = Field(default="", description="Line number (dotted decimal)")

    # Mazatec
    maz_orig: str = Field(default="", description="Original orthography")
    maz_norm: str = Field(default="", description="Normalized orthography")
    uncertain_maz: bool = Field(default=False)

    # Spanish
    spa_orig: str = Field(default="", description="Original Spanish gloss")
    spa_norm: str = Field(default="", description="Normalized Spanish gloss")
    uncertain_spa: bool = Field(default=False)

    # English
    eng_gloss: str = Field(default="", description="English gloss")
    uncertain_eng: bool = Field(default=False)

    ipa: str = Field(default="", description="IPA transcription")
    kirk_set: str = Field(default="", description="Free-text Kirk set identifier")
    kirk_sets: list[KirkSet] = Field(default_factory=list)
    variant: VariantForm | None = Field(default=None)
    notes: list[Note] = Field(default_factory=list)

    @field_validator("variant")
    @classmethod
    def _drop_empty_variant(cls, variant: VariantForm | None) -> VariantForm | None:
        return None if variant is not None and variant.is_empty else variant


class Metadata(_Record):
    """Document metadata. Every field is a plain string."""

    # Title statement
    title: str = "Vocabulario en lengua mazateca"
    alt_title: str = "Mazatec-Spanish vocabulary"
    author: str = "Ygnacio Arrona"
    editor: str = ""
    affiliation: str = ""

    # Publication
    publisher: str = ""
    date: str = ""

    # Manuscript identifier
    settlement: str = "Charlottesville, VA"
    institution: str = "University of Virginia"
    repository: str = "Albert and Shirley Small Special Collections Library"
    shelfmark: str = "MSS 01784"
    collection: str = "Gates collection"

    # Contents
    ms_contents_title: str = "Mazatec vocabulary with Spanish glosses"
    ms_contents_note: str = ""
    summary: str = ""
    main_lang: str = "maz"
    other_langs: str = "es"

    # Physical description
    phys_form: str = "codex"
    phys_extent: str = ""
    phys_layout: str = "Two columns"
    hand_note: str = ""

    # Origin
    orig_date: str = "c. 1830s"
    orig_place: str = ""

    project_desc: str = ""


class TranscriptionState(_Record):
    """Complete transcription: metadata plus ordered entries."""

    metadata: Metadata = Field(default_factory=Metadata)
    entries: list[TranscriptionEntry]

    @field_validator("entries")
    @classmethod
    def _at_least_one_entry(
        cls, entries: list[TranscriptionEntry]
    ) -> list[TranscriptionEntry]:
        if not entries:
            raise ValueError("a transcription needs at least one entry")
        return entries
