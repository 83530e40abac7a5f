"""Tests for TEI import."""

import pytest

from mazatec_tei_mcp.schemas.transcription.records import (
    Layout,
    Metadata,
    NoteType,
    TranscriptionState,
)
from mazatec_tei_mcp.servers.transcription.utils import records
from mazatec_tei_mcp.servers.transcription.utils.tei_reader import (
    ImportFailedError,
    parse_tei,
)
from mazatec_tei_mcp.servers.transcription.utils.tei_writer import render_tei

from conftest import content

TEI_OPEN = '<TEI xmlns="http://www.tei-c.org/ns/1.0">'


def test_round_trip_preserves_content(sample_state: TranscriptionState) -> None:
    imported = parse_tei(render_tei(sample_state))
    assert content(imported) == content(sample_state)


def test_round_trip_regenerates_ids(sample_state: TranscriptionState) -> None:
    imported = parse_tei(render_tei(sample_state))
    assert {e.id for e in imported.entries}.isdisjoint(
        {e.id for e in sample_state.entries}
    )


def test_round_trip_of_default_state() -> None:
    state = records.default_state()
    assert content(parse_tei(render_tei(state))) == content(state)


def test_document_without_entries_yields_default_entry() -> None:
    state = parse_tei(f"{TEI_OPEN}<teiHeader/><text><body/></text></TEI>")

    assert len(state.entries) == 1
    assert state.entries[0].page == "000032278_0004"
    assert state.entries[0].line == "1.1"
    assert state.entries[0].maz_orig == ""
    assert state.metadata == Metadata()


def test_missing_metadata_falls_back_per_field() -> None:
    state = parse_tei(
        f"{TEI_OPEN}<teiHeader><fileDesc><titleStmt>"
        '<title type="main">Otro vocabulario</title>'
        "</titleStmt></fileDesc></teiHeader><text><body/></text></TEI>"
    )
    assert state.metadata.title == "Otro vocabulario"
    assert state.metadata.author == Metadata().author
    assert state.metadata.shelfmark == Metadata().shelfmark


def test_document_without_namespace_is_read() -> None:
    state = parse_tei(
        '<TEI><text><body><div type="column" n="2"><pb n="p7"/>'
        '<entry><form type="lemma"><orth type="original" cert="low"> Nda </orth></form>'
        '<lb n="4.1"/></entry></div></body></text></TEI>'
    )
    entry = state.entries[0]
    assert entry.page == "p7"
    assert entry.column == Layout.COLUMN_2
    assert entry.line == "4.1"
    assert entry.maz_orig == " Nda "
    assert entry.uncertain_maz is True


def test_page_breaks_apply_to_following_entries() -> None:
    state = parse_tei(
        f"{TEI_OPEN}<text><body>"
        '<pb n="p1"/><entry><form type="lemma"><orth type="original">a</orth></form></entry>'
        '<pb n="p2"/><entry><form type="lemma"><orth type="original">b</orth></form></entry>'
        '<entry><form type="lemma"><orth type="original">c</orth></form></entry>'
        "</body></text></TEI>"
    )
    assert [(e.page, e.maz_orig) for e in state.entries] == [
        ("p1", "a"),
        ("p2", "b"),
        ("p2", "c"),
    ]
    assert all(e.column == Layout.ACROSS for e in state.entries)


def test_unknown_column_is_read_as_column_one() -> None:
    state = parse_tei(
        f'{TEI_OPEN}<text><body><div type="column" n="3"><entry/></div></body></text></TEI>'
    )
    assert state.entries[0].column == Layout.COLUMN_1


def test_unknown_note_type_becomes_editorial() -> None:
    state = parse_tei(
        f"{TEI_OPEN}<text><body><entry>"
        '<note type="marginal" resp="#JD">Written in pencil</note>'
        "</entry></body></text></TEI>"
    )
    note = state.entries[0].notes[0]
    assert note.type == NoteType.EDITORIAL
    assert note.resp == "JD"
    assert note.text == "Written in pencil"


@pytest.mark.parametrize("text", ["", "   \n", "this is not xml at all"])
def test_unreadable_text_raises(text: str) -> None:
    with pytest.raises(ImportFailedError):
        parse_tei(text)


def test_round_trip_keeps_surrounding_whitespace() -> None:
    state = records.default_state()
    state = records.update_entry(
        state,
        state.entries[0].id,
        {"maz_orig": " Cham", "eng_gloss": "man ", "spa_orig": "  hombre  "},
    )
    state = records.add_note(state, state.entries[0].id, text=" see margin")
    state = records.update_metadata_field(state, "summary", " A word list. ")

    imported = parse_tei(render_tei(state))

    entry = imported.entries[0]
    assert entry.maz_orig == " Cham"
    assert entry.eng_gloss == "man "
    assert entry.spa_orig == "  hombre  "
    assert entry.notes[0].text == " see margin"
    assert imported.metadata.summary == " A word list. "
    assert content(imported) == content(state)


def test_round_trip_after_emptying_variant() -> None:
    state = records.default_state()
    entry_id = state.entries[0].id
    state = records.set_variant(state, entry_id, {"abbr": "var."})
    state = records.set_variant(state, entry_id, {"abbr": ""})

    assert state.entries[0].variant is None
    assert content(parse_tei(render_tei(state))) == content(state)
