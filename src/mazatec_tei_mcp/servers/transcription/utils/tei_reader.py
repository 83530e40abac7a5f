"""Best-effort TEI import.

Reads documents written by ``tei_writer.render_tei`` back into a
``TranscriptionState``. The reader walks the parsed tree instead of
pattern-matching text, but degrades the same way field by field:

- every metadata field is looked up on its own; a missing element or
  attribute falls back to the default metadata value
- entries are collected in document order; entries directly inside
  ``<body>`` span both columns, entries inside ``<div type="column" n="…">``
  belong to that column, and the most recent ``<pb n="…"/>`` gives the page
- a document without entries yields a single fresh default entry
- text content is read exactly as written, without stripping whitespace

Only input that cannot be read as XML at all raises ``ImportFailedError``.
Identifiers are always regenerated.
"""

import logging

from lxml import etree

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
from mazatec_tei_mcp.servers.transcription.utils.records import (
    TranscriptionError,
    create_entry,
)
from mazatec_tei_mcp.utils.tei import CERT_LOW, find_leaf_text, leaf_text, strip_namespaces

logger = logging.getLogger(__name__)


class ImportFailedError(TranscriptionError):
    """Document could not be read at all."""

    pass


# Metadata field -> (path below teiHeader, attribute or None for text content)
METADATA_PATHS: dict[str, tuple[str, str | None]] = {
    "title": (".//titleStmt/title[@type='main']", None),
    "alt_title": (".//titleStmt/title[@type='alt']", None),
    "author": (".//titleStmt/author", None),
    "editor": (".//titleStmt/editor", None),
    "affiliation": (".//titleStmt/respStmt/orgName", None),
    "publisher": (".//publicationStmt/publisher", None),
    "date": (".//publicationStmt/date", None),
    "settlement": (".//msIdentifier/settlement", None),
    "institution": (".//msIdentifier/institution", None),
    "repository": (".//msIdentifier/repository", None),
    "collection": (".//msIdentifier/collection", None),
    "shelfmark": (".//msIdentifier/idno", None),
    "ms_contents_title": (".//msContents/msItem/title", None),
    "ms_contents_note": (".//msContents/msItem/note", None),
    "summary": (".//msContents/summary", None),
    "main_lang": (".//msContents/msItem/textLang", "mainLang"),
    "other_langs": (".//msContents/msItem/textLang", "otherLangs"),
    "phys_form": (".//physDesc/objectDesc", "form"),
    "phys_extent": (".//objectDesc/supportDesc/extent", None),
    "phys_layout": (".//objectDesc/layoutDesc/layout", None),
    "hand_note": (".//physDesc/handDesc/handNote", None),
    "orig_date": (".//history/origin/origDate", None),
    "orig_place": (".//history/origin/origPlace", None),
    "project_desc": (".//encodingDesc/projectDesc/p", None),
}


def _parser() -> etree.XMLParser:
    return etree.XMLParser(
        recover=True,
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
    )


def parse_tei(text: str) -> TranscriptionState:
    """Read a TEI document back into a transcription state.

    Args:
        text: Document text, usually produced by ``render_tei``

    Returns:
        New TranscriptionState (never empty)

    Raises:
        ImportFailedError: If the text contains no readable XML
    """
    root = _parse_root(text)
    try:
        metadata = parse_metadata(root)
        entries = parse_entries(root)
    except (ValueError, TypeError, AttributeError) as e:
        raise ImportFailedError(f"Could not read document structure: {e}") from e

    if not entries:
        logger.warning("No entries found in imported document, using a default entry")
        entries = [create_entry()]

    logger.info(f"Imported {len(entries)} entries")
    return TranscriptionState(metadata=metadata, entries=entries)


def _parse_root(text: str) -> etree._Element:
    if not text or not text.strip():
        raise ImportFailedError("Document is empty")
    try:
        root = etree.fromstring(text.strip().encode("utf-8"), _parser())
    except etree.XMLSyntaxError as e:
        raise ImportFailedError(f"Document is not XML: {e}") from e
    if root is None:
        raise ImportFailedError("Document is not XML")
    return strip_namespaces(root)


# =============================================================================
# Metadata
# =============================================================================


def parse_metadata(root: etree._Element) -> Metadata:
    """Extract metadata fields, each falling back to its default on its own."""
    header = root if root.tag == "teiHeader" else root.find(".//teiHeader")
    if header is None:
        logger.warning("No teiHeader in imported document, using default metadata")
        return Metadata()

    values: dict[str, str] = {}
    for field, (path, attribute) in METADATA_PATHS.items():
        elem = header.find(path)
        if elem is None:
            continue
        value = elem.get(attribute) if attribute else leaf_text(elem)
        if value:
            values[field] = value

    missing = set(METADATA_PATHS) - set(values)
    if missing:
        logger.debug(f"Metadata fields using defaults: {', '.join(sorted(missing))}")
    return Metadata(**values)


# =============================================================================
# Entries
# =============================================================================


class _Cursor:
    """Page tracked while walking the body in document order."""

    def __init__(self) -> None:
        self.page = ""


def parse_entries(root: etree._Element) -> list[TranscriptionEntry]:
    """Collect every entry under <body>, in document order."""
    body = root.find(".//text/body")
    if body is None:
        body = root.find(".//body")
    if body is None:
        return []

    entries: list[TranscriptionEntry] = []
    _walk(body, Layout.ACROSS, _Cursor(), entries)
    return entries


def _walk(
    container: etree._Element,
    layout: Layout,
    cursor: _Cursor,
    entries: list[TranscriptionEntry],
) -> None:
    for child in container:
        if child.tag == "pb":
            cursor.page = child.get("n", "")
        elif child.tag == "entry":
            entries.append(parse_entry(child, cursor.page, layout))
        elif child.tag == "div":
            child_layout = layout
            if child.get("type") == "column":
                child_layout = _column_layout(child.get("n"))
            _walk(child, child_layout, cursor, entries)


def _column_layout(n: str | None) -> Layout:
    try:
        return Layout(n)
    except ValueError:
        logger.warning(f"Unknown column '{n}', treating as column 1")
        return Layout.COLUMN_1


def _is_uncertain(elem: etree._Element | None) -> bool:
    return elem is not None and elem.get("cert") == CERT_LOW


def parse_entry(elem: etree._Element, page: str, layout: Layout) -> TranscriptionEntry:
    """Rebuild one entry from its <entry> element."""
    lemma = elem.find("form[@type='lemma']")
    if lemma is None:
        lemma = elem.find("form")
    orig_orth = None
    if lemma is not None:
        orig_orth = lemma.find("orth[@type='original']")
        if orig_orth is None:
            orig_orth = lemma.find("orth")

    sense = elem.find("sense")
    spa_orig = sense.find("def[@type='original']") if sense is not None else None
    gloss = sense.find("gloss") if sense is not None else None

    lb = elem.find("lb")

    return TranscriptionEntry(
        page=page,
        column=layout,
        line=lb.get("n", "") if lb is not None else "",
        maz_orig=leaf_text(orig_orth),
        maz_norm=find_leaf_text(lemma, "orth[@type='normalized']"),
        uncertain_maz=_is_uncertain(orig_orth),
        ipa=find_leaf_text(lemma, "pron"),
        spa_orig=leaf_text(spa_orig),
        spa_norm=find_leaf_text(sense, "def[@type='normalized']"),
        uncertain_spa=_is_uncertain(spa_orig),
        eng_gloss=leaf_text(gloss),
        uncertain_eng=_is_uncertain(gloss),
        kirk_set=find_leaf_text(elem, "xr[@type='kirkSet']"),
        kirk_sets=[_parse_kirk_set(re_elem) for re_elem in elem.findall("re[@type='kirkSet']")],
        variant=_parse_variant(elem.find("form[@type='variant']")),
        notes=[_parse_note(note) for note in elem.findall("note")],
    )


def _parse_variant(form: etree._Element | None) -> VariantForm | None:
    if form is None:
        return None
    return VariantForm(
        abbr=find_leaf_text(form, "lbl"),
        maz_orig=find_leaf_text(form, "orth[@type='original']"),
        maz_norm=find_leaf_text(form, "orth[@type='normalized']"),
    )


def _parse_kirk_set(elem: etree._Element) -> KirkSet:
    return KirkSet(
        set_number=elem.get("n", ""),
        source_page=find_leaf_text(elem, "bibl/biblScope"),
        headword=find_leaf_text(elem, "form[@type='proto']/orth"),
        daughters=[
            DaughterWord(
                text=find_leaf_text(form, "orth") or leaf_text(form),
                confirms=form.get("subtype") == "confirming",
            )
            for form in elem.findall("form[@type='daughter']")
        ],
    )


def _parse_note(elem: etree._Element) -> Note:
    raw_type = elem.get("type", NoteType.EDITORIAL.value)
    try:
        note_type = NoteType(raw_type)
    except ValueError:
        logger.warning(f"Unknown note type '{raw_type}', importing as editorial")
        note_type = NoteType.EDITORIAL
    return Note(
        type=note_type,
        resp=elem.get("resp", "").lstrip("#"),
        text=leaf_text(elem),
    )
