"""Tests for the flat custom-tag format."""

from mazatec_tei_mcp.schemas.transcription.records import (
    Note,
    NoteType,
    TranscriptionState,
)
from mazatec_tei_mcp.servers.transcription.utils import records
from mazatec_tei_mcp.servers.transcription.utils.flat_writer import (
    render_flat,
    render_flat_entry,
)


def test_minimal_entry_line() -> None:
    state = records.default_state()
    state = records.update_entry(state, state.entries[0].id, {"maz_orig": "Cham"})

    flat = render_flat(state)

    assert flat.splitlines()[-1] == (
        "<page=000032278_0004 line=1.1><old_maz>Cham</old_maz></page>"
    )


def test_empty_original_is_still_written() -> None:
    entry = records.create_entry()
    assert render_flat_entry(entry) == (
        "<page=000032278_0004 line=1.1><old_maz></old_maz></page>"
    )


def test_full_entry_field_order(sample_state: TranscriptionState) -> None:
    line = render_flat_entry(sample_state.entries[1])
    assert line == (
        "<page=000032278_0004 line=1.1>"
        '<old_maz cert="low">Cham</old_maz>'
        "<new_maz>Chan</new_maz>"
        "<ipa>tʃã</ipa>"
        '<old_spa cert="low">hombre</old_spa>'
        "<new_spa>hombre</new_spa>"
        "<eng_gloss>man</eng_gloss>"
        "</page>"
        "<kirk_set>K-12</kirk_set>"
        '<note type="editorial" resp="#IK">Ink blot over final letter</note>'
        '<note type="linguistic" resp="#JD">Cf. Chiquihuitlán</note>'
    )


def test_text_is_escaped() -> None:
    entry = records.create_entry().model_copy(
        update={
            "maz_orig": "a<b & c",
            "notes": [Note(type=NoteType.SEMANTIC, resp="", text="x > y")],
        }
    )
    assert render_flat_entry(entry) == (
        "<page=000032278_0004 line=1.1><old_maz>a&lt;b &amp; c</old_maz></page>"
        '<note type="semantic">x &gt; y</note>'
    )


def test_document_has_taxonomy_metadata_and_one_line_per_entry(
    sample_state: TranscriptionState,
) -> None:
    flat = render_flat(sample_state)

    assert flat.startswith("<encodingDesc>")
    assert '<category xml:id="orthographic"><catDesc>Spelling/graphemes</catDesc></category>' in flat
    assert "<title>Vocabulario en lengua mazateca</title>" in flat
    assert "<shelfmark>MSS 01784</shelfmark>" in flat

    entry_lines = [line for line in flat.splitlines() if line.startswith("<page=")]
    assert len(entry_lines) == len(sample_state.entries)
    assert entry_lines[0].startswith("<page=000032278_0004 line=0.1>")


def test_render_is_deterministic(sample_state: TranscriptionState) -> None:
    assert render_flat(sample_state) == render_flat(sample_state)


def test_uncertain_spanish_adds_single_cert_on_old_spa() -> None:
    entry = records.create_entry().model_copy(
        update={"maz_orig": "Cham", "spa_orig": "hombre"}
    )
    certain = render_flat_entry(entry)
    uncertain = render_flat_entry(entry.model_copy(update={"uncertain_spa": True}))

    assert certain.count('cert="low"') == 0
    assert uncertain.count('cert="low"') == 1
    assert uncertain == (
        "<page=000032278_0004 line=1.1><old_maz>Cham</old_maz>"
        '<old_spa cert="low">hombre</old_spa></page>'
    )


def test_uncertain_mazatec_and_english_are_marked() -> None:
    entry = records.create_entry().model_copy(
        update={
            "maz_orig": "Tzin",
            "uncertain_maz": True,
            "eng_gloss": "woman",
            "uncertain_eng": True,
        }
    )
    assert render_flat_entry(entry) == (
        '<page=000032278_0004 line=1.1><old_maz cert="low">Tzin</old_maz>'
        '<eng_gloss cert="low">woman</eng_gloss></page>'
    )


def test_page_and_line_are_escaped() -> None:
    entry = records.create_entry().model_copy(update={"page": "f<3>", "line": "1&2"})
    assert render_flat_entry(entry).startswith(
        "<page=f&lt;3&gt; line=1&amp;2><old_maz></old_maz>"
    )
