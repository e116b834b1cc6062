"""
DOCX Builder - New Word document from plain text

One paragraph per line, Times New Roman, heading-like lines in bold.

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
from __future__ import annotations

import io
import logging
import re
from pathlib import Path
from typing import Union

from docx import Document
from docx.oxml import OxmlElement
from docx.oxml.ns import qn

logger = logging.getLogger("vietcorrect.docx_builder")

FONT_NAME = "Times New Roman"
TITLE_MIN_LENGTH = 5
SOURCE_SUFFIX = re.compile(r'\.(pdf|txt|docx)$', re.IGNORECASE)


def is_title_line(line: str) -> bool:
    """Only uppercase letters and spaces, at least five characters."""
    stripped = line.strip()
    return len(stripped) >= TITLE_MIN_LENGTH and all(
        c.isspace() or (c.isalpha() and c.isupper()) for c in stripped
    )


def fixed_docx_name(file_name: str) -> str:
    """Output name for a corrected document, e.g. bao_cao.pdf → bao_cao_fixed.docx."""
    return SOURCE_SUFFIX.sub("", file_name or "document") + "_fixed.docx"


def _set_run_font(run):
    run.font.name = FONT_NAME
    r_pr = run._element.get_or_add_rPr()
    r_fonts = r_pr.find(qn("w:rFonts"))
    if r_fonts is None:
        r_fonts = OxmlElement("w:rFonts")
        r_pr.append(r_fonts)
    # python-docx only sets ascii/hAnsi; complex script font for diacritics
    r_fonts.set(qn("w:cs"), FONT_NAME)


def build_document(text: str):
    document = Document()
    for line in (text or "").split("\n"):
        paragraph = document.add_paragraph()
        run = paragraph.add_run(line)
        _set_run_font(run)
        if is_title_line(line):
            run.bold = True
    return document


def create_docx_from_text(text: str) -> bytes:
    """Serialized .docx with one paragraph per line of text."""
    document = build_document(text)
    buffer = io.BytesIO()
    document.save(buffer)
    logger.info("Created DOCX with %d paragraphs", len(document.paragraphs))
    return buffer.getvalue()


def save_docx_from_text(text: str, output_path: Union[str, Path]) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(create_docx_from_text(text))
    logger.info("DOCX written to %s", output_path)
    return output_path
