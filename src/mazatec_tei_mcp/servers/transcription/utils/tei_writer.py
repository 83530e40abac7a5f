"""TEI P5 serialization of a transcription.

``render_tei`` is a pure function of the state: the same state always
yields byte-identical output. Empty fields produce no markup, with the
single exception of the original Mazatec orthography, which every entry
carries (possibly empty-bodied).

Document layout::

    <?xml version='1.0' encoding='UTF-8'?>
    <?xml-model href="...tei_all.rng" ...?>
    <TEI>
      <teiHeader>...</teiHeader>
      <text><body>
        entries spanning both columns
        <div type="column" n="1">...</div>
        <div type="column" n="2">...</div>
      </body></text>
    </TEI>
"""

from collections.abc import Iterable

from lxml import etree

from mazatec_tei_mcp.config.base import TEI_MODEL_HREF, TEI_NAMESPACE
from mazatec_tei_mcp.schemas.transcription.records import (
    LAYOUT_ORDER,
    NOTE_TYPE_DESCRIPTIONS,
    KirkSet,
    Layout,
    Metadata,
    TranscriptionEntry,
    TranscriptionState,
    VariantForm,
)
from mazatec_tei_mcp.utils.tei import (
    XML_ID,
    XML_LANG,
    cert_attrib,
    drop_if_empty,
    sub_element,
    sub_text,
    tei,
    xml_id_token,
)

EDITION_STATEMENT = "Digital diplomatic transcription"
TAXONOMY_ID = "noteTypes"

# Column index used inside synthesized entry identifiers
_GROUP_INDEX = {Layout.ACROSS: "0", Layout.COLUMN_1: "1", Layout.COLUMN_2: "2"}


def render_tei(state: TranscriptionState) -> str:
    """Serialize metadata and entries to a TEI P5 document.

    Args:
        state: Current transcription state

    Returns:
        Complete TEI XML document as a string
    """
    root = etree.Element(tei("TEI"), nsmap={None: TEI_NAMESPACE})
    build_header(root, state.metadata)

    text = sub_element(root, "text")
    body = sub_element(text, "body")
    for layout in LAYOUT_ORDER:
        group = [e for e in state.entries if e.column == layout]
        if not group:
            continue
        if layout == Layout.ACROSS:
            _append_group(body, group, layout)
        else:
            div = sub_element(body, "div", attrib={"type": "column", "n": layout.value})
            _append_group(div, group, layout)

    tree = etree.ElementTree(root)
    root.addprevious(
        etree.ProcessingInstruction(
            "xml-model",
            f'href="{TEI_MODEL_HREF}" type="application/xml" '
            'schematypens="http://relaxng.org/ns/structure/1.0"',
        )
    )
    return etree.tostring(
        tree, pretty_print=True, xml_declaration=True, encoding="UTF-8"
    ).decode("utf-8")


# =============================================================================
# Header
# =============================================================================


def build_header(parent: etree._Element, metadata: Metadata) -> etree._Element:
    """Append the teiHeader built from the metadata record."""
    header = sub_element(parent, "teiHeader")
    file_desc = sub_element(header, "fileDesc")

    # Title statement
    title_stmt = sub_element(file_desc, "titleStmt")
    sub_text(title_stmt, "title", metadata.title, {"type": "main"})
    sub_text(title_stmt, "title", metadata.alt_title, {"type": "alt"})
    sub_text(title_stmt, "author", metadata.author)
    sub_text(title_stmt, "editor", metadata.editor)
    if metadata.editor or metadata.affiliation:
        resp_stmt = sub_element(title_stmt, "respStmt")
        sub_element(resp_stmt, "resp", "Transcription and encoding")
        sub_text(resp_stmt, "name", metadata.editor)
        sub_text(resp_stmt, "orgName", metadata.affiliation)

    edition_stmt = sub_element(file_desc, "editionStmt")
    sub_element(edition_stmt, "edition", EDITION_STATEMENT)

    publication_stmt = sub_element(file_desc, "publicationStmt")
    sub_text(publication_stmt, "publisher", metadata.publisher)
    sub_text(publication_stmt, "date", metadata.date)
    if len(publication_stmt) == 0:
        # publicationStmt may not be empty in TEI
        sub_element(publication_stmt, "p", "Unpublished transcription")

    source_desc = sub_element(file_desc, "sourceDesc")
    _build_ms_desc(source_desc, metadata)

    encoding_desc = sub_element(header, "encodingDesc")
    if metadata.project_desc:
        project_desc = sub_element(encoding_desc, "projectDesc")
        sub_element(project_desc, "p", metadata.project_desc)
    class_decl = sub_element(encoding_desc, "classDecl")
    taxonomy = sub_element(class_decl, "taxonomy", attrib={XML_ID: TAXONOMY_ID})
    for note_type, description in NOTE_TYPE_DESCRIPTIONS.items():
        category = sub_element(taxonomy, "category", attrib={XML_ID: note_type.value})
        sub_element(category, "catDesc", description)

    return header


def _build_ms_desc(parent: etree._Element, metadata: Metadata) -> etree._Element:
    ms_desc = sub_element(parent, "msDesc")

    ms_identifier = sub_element(ms_desc, "msIdentifier")
    sub_text(ms_identifier, "settlement", metadata.settlement)
    sub_text(ms_identifier, "institution", metadata.institution)
    sub_text(ms_identifier, "repository", metadata.repository)
    sub_text(ms_identifier, "collection", metadata.collection)
    sub_text(ms_identifier, "idno", metadata.shelfmark, {"type": "shelfmark"})

    ms_contents = sub_element(ms_desc, "msContents")
    sub_text(ms_contents, "summary", metadata.summary)
    ms_item = sub_element(ms_contents, "msItem")
    sub_text(ms_item, "title", metadata.ms_contents_title)
    sub_text(ms_item, "note", metadata.ms_contents_note)
    if metadata.main_lang:
        text_lang = sub_element(ms_item, "textLang", attrib={"mainLang": metadata.main_lang})
        if metadata.other_langs:
            text_lang.set("otherLangs", metadata.other_langs)
    drop_if_empty(ms_item)
    drop_if_empty(ms_contents)

    phys_desc = sub_element(ms_desc, "physDesc")
    object_desc = sub_element(phys_desc, "objectDesc")
    if metadata.phys_form:
        object_desc.set("form", metadata.phys_form)
    if metadata.phys_extent:
        support_desc = sub_element(object_desc, "supportDesc")
        sub_element(support_desc, "extent", metadata.phys_extent)
    if metadata.phys_layout:
        layout_desc = sub_element(object_desc, "layoutDesc")
        sub_element(layout_desc, "layout", metadata.phys_layout)
    if len(object_desc) == 0 and not object_desc.attrib:
        phys_desc.remove(object_desc)
    if metadata.hand_note:
        hand_desc = sub_element(phys_desc, "handDesc")
        sub_element(hand_desc, "handNote", metadata.hand_note)
    drop_if_empty(phys_desc)

    if metadata.orig_place or metadata.orig_date:
        history = sub_element(ms_desc, "history")
        origin = sub_element(history, "origin")
        sub_text(origin, "origPlace", metadata.orig_place)
        sub_text(origin, "origDate", metadata.orig_date)

    return ms_desc


# =============================================================================
# Entries
# =============================================================================


def _append_group(
    parent: etree._Element, entries: Iterable[TranscriptionEntry], layout: Layout
) -> None:
    """Append one layout group, with a page break before every page run."""
    current_page: str | None = None
    for count, entry in enumerate(entries, start=1):
        if entry.page != current_page:
            sub_element(parent, "pb", attrib={"n": entry.page} if entry.page else {})
            current_page = entry.page
        build_entry(parent, entry, entry_xml_id(entry, layout, count))


def entry_xml_id(entry: TranscriptionEntry, layout: Layout, count: int) -> str:
    """Identifier synthesized from page, column group and running count.

    Example:
        >>> entry_xml_id(TranscriptionEntry(page="000032278_0004"), Layout.COLUMN_1, 3)
        'e000032278_0004.c1.003'
    """
    return f"e{xml_id_token(entry.page)}.c{_GROUP_INDEX[layout]}.{count:03d}"


def build_entry(
    parent: etree._Element, entry: TranscriptionEntry, xml_id: str
) -> etree._Element:
    """Append one <entry> element."""
    elem = sub_element(parent, "entry", attrib={XML_ID: xml_id})

    lemma = sub_element(elem, "form", attrib={"type": "lemma"})
    sub_element(
        lemma,
        "orth",
        entry.maz_orig,
        {"type": "original", **cert_attrib(entry.uncertain_maz)},
    )
    sub_text(lemma, "orth", entry.maz_norm, {"type": "normalized"})
    sub_text(lemma, "pron", entry.ipa, {"notation": "ipa"})

    if entry.variant is not None and not entry.variant.is_empty:
        _build_variant(elem, entry.variant)

    if entry.spa_orig or entry.spa_norm or entry.eng_gloss:
        sense = sub_element(elem, "sense")
        sub_text(
            sense,
            "def",
            entry.spa_orig,
            {XML_LANG: "es", "type": "original", **cert_attrib(entry.uncertain_spa)},
        )
        sub_text(sense, "def", entry.spa_norm, {XML_LANG: "es", "type": "normalized"})
        sub_text(
            sense,
            "gloss",
            entry.eng_gloss,
            {XML_LANG: "en", **cert_attrib(entry.uncertain_eng)},
        )

    sub_text(elem, "xr", entry.kirk_set, {"type": "kirkSet"})
    for kirk_set in entry.kirk_sets:
        if not kirk_set.is_empty:
            _build_kirk_set(elem, kirk_set)

    for note in entry.notes:
        if not note.text:
            continue
        attrib = {"type": note.type.value}
        if note.resp:
            attrib["resp"] = note.resp if note.resp.startswith("#") else f"#{note.resp}"
        sub_element(elem, "note", note.text, attrib)

    if entry.line:
        sub_element(elem, "lb", attrib={"n": entry.line})

    return elem


def _build_variant(parent: etree._Element, variant: VariantForm) -> etree._Element:
    form = sub_element(parent, "form", attrib={"type": "variant"})
    sub_text(form, "lbl", variant.abbr)
    sub_text(form, "orth", variant.maz_orig, {"type": "original"})
    sub_text(form, "orth", variant.maz_norm, {"type": "normalized"})
    return form


def _build_kirk_set(parent: etree._Element, kirk_set: KirkSet) -> etree._Element:
    attrib = {"type": "kirkSet"}
    if kirk_set.set_number:
        attrib["n"] = kirk_set.set_number
    elem = sub_element(parent, "re", attrib=attrib)

    if kirk_set.source_page:
        bibl = sub_element(elem, "bibl")
        sub_element(bibl, "biblScope", kirk_set.source_page, {"unit": "page"})
    if kirk_set.headword:
        proto = sub_element(elem, "form", attrib={"type": "proto"})
        sub_element(proto, "orth", kirk_set.headword)
    for daughter in kirk_set.daughters:
        if not daughter.text:
            continue
        daughter_attrib = {"type": "daughter"}
        if daughter.confirms:
            daughter_attrib["subtype"] = "confirming"
        form = sub_element(elem, "form", attrib=daughter_attrib)
        sub_element(form, "orth", daughter.text)

    return elem
