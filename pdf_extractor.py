"""
PDF Extractor - Plain text from PDF pages

Spans are read in page order with PyMuPDF. A new line starts whenever the
baseline moves vertically by more than LINE_GAP_THRESHOLD points.

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

import fitz  # PyMuPDF

logger = logging.getLogger("vietcorrect.pdf")

LINE_GAP_THRESHOLD = 5.0


class PdfExtractionError(Exception):
    """The PDF could not be opened or read."""
    pass


def _open_pdf(source: Union[bytes, str, Path]):
    try:
        if isinstance(source, (bytes, bytearray)):
            return fitz.open(stream=bytes(source), filetype="pdf")
        return fitz.open(str(source))
    except Exception as e:
        raise PdfExtractionError(f"Cannot open PDF: {e}") from e


def extract_page_text(page, gap_threshold: float = LINE_GAP_THRESHOLD) -> str:
    """Text of one page, spans separated by spaces, lines by vertical gaps."""
    parts: List[str] = []
    last_y: Optional[float] = None

    blocks = page.get_text("dict", flags=fitz.TEXT_PRESERVE_WHITESPACE)["blocks"]
    for block in blocks:
        if block.get("type", 0) != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                y = span["origin"][1]
                if last_y is not None and abs(y - last_y) > gap_threshold:
                    parts.append("\n")
                last_y = y
                parts.append(span.get("text", "") + " ")

    return "".join(parts)


def extract_pdf_text(source: Union[bytes, str, Path],
                     gap_threshold: float = LINE_GAP_THRESHOLD) -> str:
    """All pages, each followed by a blank line."""
    doc = _open_pdf(source)
    try:
        pages = [extract_page_text(page, gap_threshold) + "\n\n" for page in doc]
    except Exception as e:
        raise PdfExtractionError(f"PDF text extraction failed: {e}") from e
    finally:
        doc.close()

    logger.info("Extracted text from %d PDF pages", len(pages))
    return "".join(pages)
