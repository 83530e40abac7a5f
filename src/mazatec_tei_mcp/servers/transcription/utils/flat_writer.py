"""Flat custom-tag serialization of a transcription.

The early working format: a note-type taxonomy, one tag per metadata field,
then one line per entry::

    <page=000032278_0004 line=1.1><old_maz>Cham</old_maz><eng_gloss>...</eng_gloss></page><note type="editorial" resp="#IK">...</note>

Empty fields are left out entirely; only ``old_maz`` is always written.
Uncertain readings carry ``cert="low"`` on ``old_maz``, ``old_spa`` and
``eng_gloss``.
Notes and the Kirk set identifier follow the closing ``</page>`` tag.
There is no reader for this format.
"""

from xml.sax.saxutils import escape, quoteattr

from mazatec_tei_mcp.schemas.transcription.records import (
    NOTE_TYPE_DESCRIPTIONS,
    Metadata,
    TranscriptionEntry,
    TranscriptionState,
)
from mazatec_tei_mcp.utils.tei import CERT_LOW

# Entry fields in output order: field, flat tag name, uncertainty flag
_ENTRY_TAGS: tuple[tuple[str, str, str | None], ...] = (
    ("maz_norm", "new_maz", None),
    ("ipa", "ipa", None),
    ("spa_orig", "old_spa", "uncertain_spa"),
    ("spa_norm", "new_spa", None),
    ("eng_gloss", "eng_gloss", "uncertain_eng"),
)


def render_flat(state: TranscriptionState) -> str:
    """Serialize metadata and entries to the flat tag format.

    Args:
        state: Current transcription state

    Returns:
        Flat document, one entry per line
    """
    parts = [_render_taxonomy(), _render_metadata(state.metadata)]
    parts.append("\n".join(render_flat_entry(entry) for entry in state.entries))
    return "\n\n".join(parts).strip()


def _render_taxonomy() -> str:
    lines = ["<encodingDesc>", "  <classDecl>", '    <taxonomy xml:id="noteTypes">']
    lines.extend(
        f'      <category xml:id="{note_type.value}"><catDesc>{escape(desc)}</catDesc></category>'
        for note_type, desc in NOTE_TYPE_DESCRIPTIONS.items()
    )
    lines.extend(["    </taxonomy>", "  </classDecl>", "</encodingDesc>"])
    return "\n".join(lines)


def _render_metadata(metadata: Metadata) -> str:
    return "\n".join(
        f"<{field}>{escape(value)}</{field}>"
        for field, value in metadata.model_dump().items()
    )


def _field(tag: str, value: str, uncertain: bool = False) -> str:
    cert = f' cert="{CERT_LOW}"' if uncertain else ""
    return f"<{tag}{cert}>{escape(value)}</{tag}>"


def render_flat_entry(entry: TranscriptionEntry) -> str:
    """Render one entry as a single line."""
    parts = [f"<page={escape(entry.page)} line={escape(entry.line)}>"]
    parts.append(_field("old_maz", entry.maz_orig, entry.uncertain_maz))
    for field, tag, flag in _ENTRY_TAGS:
        value = getattr(entry, field)
        if value:
            parts.append(_field(tag, value, bool(flag and getattr(entry, flag))))
    parts.append("</page>")

    if entry.kirk_set:
        parts.append(f"<kirk_set>{escape(entry.kirk_set)}</kirk_set>")

    for note in entry.notes:
        if not note.text:
            continue
        resp = ""
        if note.resp:
            resp_ref = note.resp if note.resp.startswith("#") else f"#{note.resp}"
            resp = f" resp={quoteattr(resp_ref)}"
        parts.append(f'<note type="{note.type.value}"{resp}>{escape(note.text)}</note>')

    return "".join(parts)
