"""Shared test fixtures."""

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from mazatec_tei_mcp.schemas.transcription.records import (
    DaughterWord,
    KirkSet,
    Layout,
    Metadata,
    Note,
    NoteType,
    TranscriptionEntry,
    TranscriptionState,
    VariantForm,
)
from mazatec_tei_mcp.servers.transcription.utils.session import (
    TranscriptionSession,
    set_session,
)
from mazatec_tei_mcp.servers.transcription.utils.storage import StateStore

FULL_METADATA = Metadata(
    title="Vocabulario en lengua mazateca",
    alt_title="Arrona vocabulary",
    author="Ygnacio Arrona",
    editor="Ana Editor",
    affiliation="University of Virginia",
    publisher="Mazatec Manuscript Project",
    date="2024",
    settlement="Charlottesville, VA",
    institution="University of Virginia",
    repository="Small Special Collections Library",
    shelfmark="MSS 01784",
    collection="Gates collection",
    ms_contents_title="Mazatec vocabulary",
    ms_contents_note="Word list with Spanish glosses",
    summary="A bilingual word list.",
    main_lang="maz",
    other_langs="es",
    phys_form="codex",
    phys_extent="12 leaves",
    phys_layout="Two columns",
    hand_note="One hand, iron-gall ink",
    orig_date="c. 1830s",
    orig_place="Huautla de Jiménez",
    project_desc="Diplomatic transcription of the Arrona manuscript.",
)

# Entries in layout group order (across, column 1, column 2) so that the
# TEI document order matches the list order
SAMPLE_ENTRIES = [
    TranscriptionEntry(
        page="000032278_0004",
        column=Layout.ACROSS,
        line="0.1",
        maz_orig="Vocabulario",
        spa_orig="Vocabulario de la lengua",
    ),
    TranscriptionEntry(
        page="000032278_0004",
        column=Layout.COLUMN_1,
        line="1.1",
        maz_orig="Cham",
        maz_norm="Chan",
        uncertain_maz=True,
        spa_orig="hombre",
        spa_norm="hombre",
        uncertain_spa=True,
        eng_gloss="man",
        ipa="tʃã",
        kirk_set="K-12",
        variant=VariantForm(abbr="var.", maz_orig="Chama", maz_norm="Chaman"),
        kirk_sets=[
            KirkSet(
                set_number="12",
                source_page="45",
                headword="*ʃa",
                daughters=[
                    DaughterWord(text="ʃa", confirms=True),
                    DaughterWord(text="tʃa"),
                ],
            )
        ],
        notes=[
            Note(type=NoteType.EDITORIAL, resp="IK", text="Ink blot over final letter"),
            Note(type=NoteType.LINGUISTIC, resp="JD", text="Cf. Chiquihuitlán"),
        ],
    ),
    TranscriptionEntry(
        page="000032278_0005",
        column=Layout.COLUMN_1,
        line="1.1",
        maz_orig="Tzin",
        eng_gloss="woman",
        uncertain_eng=True,
    ),
    TranscriptionEntry(
        page="000032278_0005",
        column=Layout.COLUMN_2,
        line="1.1",
        maz_orig="Nda",
        spa_norm="agua",
    ),
]


def content(data: Any) -> Any:
    """Model dump without process-local identifiers, for comparisons."""
    if hasattr(data, "model_dump"):
        data = data.model_dump()
    if isinstance(data, dict):
        return {k: content(v) for k, v in data.items() if k != "id"}
    if isinstance(data, list):
        return [content(item) for item in data]
    return data


@pytest.fixture
def sample_state() -> TranscriptionState:
    """A fully populated transcription with four entries on two pages."""
    return TranscriptionState(metadata=FULL_METADATA, entries=list(SAMPLE_ENTRIES))


@pytest.fixture
def store(tmp_path: Path) -> StateStore:
    return StateStore(tmp_path / "state" / "transcription_data_v4.json", "transcription_data_v4")


@pytest.fixture
def session(store: StateStore) -> Iterator[TranscriptionSession]:
    """Session on a temporary store, installed as the process-wide session."""
    session = TranscriptionSession(store)
    set_session(session)
    yield session
    set_session(None)
