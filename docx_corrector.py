"""
DOCX Corrector - In-place normalization of Word documents

Runs every paragraph of word/document.xml through the line normalizer while
preserving:
- Run formatting (bold, italic, fonts, colors)
- Paragraph structure (no run is added or removed)
- List numbering (resolved to a visible bullet, removed only when the bullet
  is baked into the text)

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
from __future__ import annotations

import io
import logging
import re
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Tuple, Union

from docx import Document
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.exceptions import PackageNotFoundError
from docx.oxml.ns import qn
from lxml.etree import XMLSyntaxError

from numbering import EMPTY_LOOKUP, NumberingLookup, build_numbering_lookup
from text_processor import normalize_line

logger = logging.getLogger("vietcorrect.docx")

DocxSource = Union[bytes, str, Path, BinaryIO]

# Bullet baked into the text: the numbering definition would draw a second one
FLATTENED_BULLET = re.compile(r'^([-+*•]|\+\))')

XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"


class DocxProcessingError(Exception):
    """The document could not be read, corrected or written."""
    pass


@dataclass
class CorrectionResult:
    """Result of an in-place document correction."""
    paragraphs_corrected: int = 0
    paragraphs_skipped: int = 0
    numbering_removed: int = 0
    output_path: Optional[str] = None


# =============================================================================
# PARAGRAPH ACCESS
# =============================================================================

def _owning_paragraph(element):
    for ancestor in element.iterancestors(qn("w:p")):
        return ancestor
    return None


def paragraph_text_nodes(p) -> List:
    """
    The <w:t> elements of the paragraph's runs, in document order.

    Text of a nested paragraph (text box inside a drawing) belongs to that
    paragraph, not to the outer one.
    """
    return [
        t for t in p.iter(qn("w:t"))
        if t.getparent().tag == qn("w:r") and _owning_paragraph(t) is p
    ]


def paragraph_numbering(p) -> Tuple[Optional[object], Optional[str], str]:
    """(numPr element, numId, ilvl) of the paragraph; ilvl defaults to "0"."""
    p_pr = p.find(qn("w:pPr"))
    num_pr = p_pr.find(qn("w:numPr")) if p_pr is not None else None
    if num_pr is None:
        return None, None, "0"

    num_id_el = num_pr.find(qn("w:numId"))
    ilvl_el = num_pr.find(qn("w:ilvl"))
    num_id = num_id_el.get(qn("w:val")) if num_id_el is not None else None
    ilvl = ilvl_el.get(qn("w:val")) if ilvl_el is not None else None
    return num_pr, num_id, ilvl or "0"


def bullet_prefix(p, lookup: Optional[NumberingLookup]) -> str:
    if lookup is None:
        return ""
    _, num_id, ilvl = paragraph_numbering(p)
    glyph = lookup.resolve_bullet(num_id, ilvl)
    return f"{glyph} " if glyph else ""


def extract_paragraph_text(p, lookup: Optional[NumberingLookup] = None) -> str:
    """Plain paragraph text, prefixed with its resolved bullet when numbered."""
    text = "".join(t.text or "" for t in paragraph_text_nodes(p))
    return bullet_prefix(p, lookup) + text


# =============================================================================
# REDISTRIBUTION
# =============================================================================

def redistribute_text(fragments: Sequence[str], processed_text: str) -> List[str]:
    """
    Split processed_text back over the original fragments.

    Each fragment takes as many characters as it had before; a positive
    length difference (inserted bullet) goes to the first fragment and the
    last fragment takes whatever remains. The result always concatenates to
    processed_text and has as many items as fragments.
    """
    if not fragments:
        return []

    length_diff = len(processed_text) - sum(len(f) for f in fragments)
    last = len(fragments) - 1
    result = []
    cursor = 0

    for k, original in enumerate(fragments):
        target = len(original)
        if k == 0 and length_diff > 0:
            target += length_diff
        end = cursor + target

        if k == last:
            result.append(processed_text[cursor:])
        elif cursor >= len(processed_text):
            result.append("")
        else:
            result.append(processed_text[cursor:end])

        cursor = end

    return result


def _set_text(t, value: str):
    t.text = value
    if value != value.strip():
        t.set(XML_SPACE, "preserve")


def correct_paragraph(p, lookup: Optional[NumberingLookup] = None) -> bool:
    """
    Normalize one <w:p> in place.

    Returns False when the paragraph has no text runs or only whitespace;
    such paragraphs are left untouched.
    """
    text_nodes = paragraph_text_nodes(p)
    if not text_nodes:
        return False

    originals = [t.text or "" for t in text_nodes]
    full_text = "".join(originals)
    if not full_text.strip():
        return False

    prefix = bullet_prefix(p, lookup)
    processed_text = normalize_line(prefix + full_text)

    if prefix and FLATTENED_BULLET.match(processed_text.strip()):
        num_pr, _, _ = paragraph_numbering(p)
        if num_pr is not None:
            num_pr.getparent().remove(num_pr)
            logger.debug("Removed numbering reference for flattened bullet: %s", processed_text[:50])

    for t, value in zip(text_nodes, redistribute_text(originals, processed_text)):
        _set_text(t, value)

    return True


# =============================================================================
# DOCUMENT LEVEL
# =============================================================================

def open_docx(source: DocxSource):
    """Load a .docx from bytes, a path or a file object."""
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    elif isinstance(source, Path):
        source = str(source)

    try:
        return Document(source)
    except (PackageNotFoundError, zipfile.BadZipFile, XMLSyntaxError, KeyError, ValueError) as e:
        raise DocxProcessingError(f"Invalid DOCX file: {e}") from e


def load_numbering(document) -> NumberingLookup:
    """Numbering lookup from word/numbering.xml, empty when the part is absent."""
    try:
        numbering_part = document.part.part_related_by(RT.NUMBERING)
    except KeyError:
        logger.debug("No numbering part in document")
        return EMPTY_LOOKUP
    return build_numbering_lookup(numbering_part.element)


def _paragraphs(document):
    return list(document.element.body.iter(qn("w:p")))


def extract_docx_text(source: DocxSource) -> str:
    """One line per paragraph, numbered paragraphs prefixed with their bullet."""
    document = open_docx(source)
    lookup = load_numbering(document)

    lines = [extract_paragraph_text(p, lookup) + "\n" for p in _paragraphs(document)]
    logger.info("Extracted %d paragraphs from DOCX", len(lines))
    return "".join(lines)


def correct_document(document) -> CorrectionResult:
    """Normalize every paragraph of an opened python-docx Document in place."""
    result = CorrectionResult()
    lookup = load_numbering(document)

    for p in _paragraphs(document):
        had_numbering = paragraph_numbering(p)[0] is not None
        if not correct_paragraph(p, lookup):
            result.paragraphs_skipped += 1
            continue
        result.paragraphs_corrected += 1
        if had_numbering and paragraph_numbering(p)[0] is None:
            result.numbering_removed += 1

    logger.info(
        "DOCX corrected: %d paragraphs, %d skipped, %d numbering references removed",
        result.paragraphs_corrected, result.paragraphs_skipped, result.numbering_removed
    )
    return result


def correct_docx(source: DocxSource) -> bytes:
    """Correct a .docx and return the new package bytes."""
    document = open_docx(source)
    correct_document(document)

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def correct_docx_file(input_path: Union[str, Path],
                      output_path: Optional[Union[str, Path]] = None) -> CorrectionResult:
    """Correct a .docx on disk; default output is <stem>_fixed.docx next to it."""
    input_path = Path(input_path)
    if not input_path.exists():
        raise DocxProcessingError(f"File not found: {input_path}")

    if output_path is None:
        output_path = input_path.with_name(f"{input_path.stem}_fixed.docx")
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    document = open_docx(input_path)
    result = correct_document(document)
    document.save(str(output_path))

    result.output_path = str(output_path)
    logger.info("Corrected DOCX written to %s", output_path)
    return result
