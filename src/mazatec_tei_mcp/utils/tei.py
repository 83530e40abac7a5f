"""Universal TEI XML utilities.

Small helpers shared by the TEI writer and reader: element construction
that skips empty content, identifier tokens, and namespace-agnostic
lookups for reading documents back in.
"""

import re

from lxml import etree

from mazatec_tei_mcp.config.base import TEI_NAMESPACE, XML_NAMESPACE

XML_ID = f"{{{XML_NAMESPACE}}}id"
XML_LANG = f"{{{XML_NAMESPACE}}}lang"

# Attribute value marking a low-confidence reading
CERT_LOW = "low"

# Characters outside the XML 1.0 Char production
_XML_ILLEGAL = re.compile(r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def xml_safe(text: str) -> str:
    r"""Drop characters that cannot appear in an XML 1.0 document.

    Example:
        >>> xml_safe("page\x0cbreak")
        'pagebreak'
    """
    return _XML_ILLEGAL.sub("", text)


def tei(tag: str) -> str:
    """Qualified TEI tag name (Clark notation)."""
    return f"{{{TEI_NAMESPACE}}}{tag}"


def sub_element(
    parent: etree._Element,
    tag: str,
    text: str | None = None,
    attrib: dict[str, str] | None = None,
) -> etree._Element:
    """Append a TEI child element with optional text and attributes."""
    elem = etree.SubElement(parent, tei(tag), attrib=attrib or {})
    if text:
        elem.text = text
    return elem


def sub_text(
    parent: etree._Element,
    tag: str,
    text: str | None,
    attrib: dict[str, str] | None = None,
) -> etree._Element | None:
    """Append a TEI child element only if ``text`` is non-empty.

    Returns:
        The new element, or None when nothing was appended
    """
    if not text:
        return None
    return sub_element(parent, tag, text, attrib)


def cert_attrib(uncertain: bool) -> dict[str, str]:
    """Certainty attribute, present only for uncertain readings."""
    return {"cert": CERT_LOW} if uncertain else {}


def drop_if_empty(elem: etree._Element) -> None:
    """Remove a container element that ended up without children or text."""
    parent = elem.getparent()
    if parent is not None and len(elem) == 0 and not (elem.text or "").strip():
        parent.remove(elem)


def xml_id_token(value: str) -> str:
    """Turn a free-form value into a token usable inside an xml:id.

    Example:
        >>> xml_id_token("000032278_0004")
        '000032278_0004'
        >>> xml_id_token("f. 3r")
        'f._3r'
    """
    token = re.sub(r"[^\w.-]+", "_", value.strip())
    return token or "x"


def strip_namespaces(root: etree._Element) -> etree._Element:
    """Remove namespaces, comments and processing instructions in place.

    Lets the reader address elements by local name whether or not the
    document declares the TEI namespace. The ``xml:`` attributes (id, lang)
    keep their namespace.

    Args:
        root: Parsed root element

    Returns:
        The same root element
    """
    for elem in list(root.iter()):
        if isinstance(elem, (etree._ProcessingInstruction, etree._Comment)):
            parent = elem.getparent()
            if parent is not None:
                # Keep the tail text attached to the document
                if elem.tail:
                    previous = elem.getprevious()
                    if previous is not None:
                        previous.tail = (previous.tail or "") + elem.tail
                    else:
                        parent.text = (parent.text or "") + elem.tail
                parent.remove(elem)
            continue
        if isinstance(elem.tag, str):
            elem.tag = etree.QName(elem).localname
    etree.cleanup_namespaces(root)
    return root


def leaf_text(element: etree._Element | None) -> str:
    """Text content of an element, exactly as written.

    Leaf fields keep their leading and trailing whitespace so that a value
    reads back the way it was serialized.

    Args:
        element: Element to extract text from

    Returns:
        Extracted text, or "" if element is None
    """
    if element is None:
        return ""
    return "".join(element.itertext())


def find_leaf_text(parent: etree._Element | None, path: str) -> str:
    """Text of the first element matching ``path`` below ``parent``."""
    if parent is None:
        return ""
    return leaf_text(parent.find(path))
