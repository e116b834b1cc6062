"""
Shared fixtures: minimal OOXML packages built in memory.
"""
import io
import sys
import zipfile
from pathlib import Path
from xml.sax.saxutils import escape

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

CONTENT_TYPES = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="xml" ContentType="application/xml"/>
  <Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
  {numbering_override}
</Types>"""

NUMBERING_OVERRIDE = (
    '<Override PartName="/word/numbering.xml" '
    'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"/>'
)

PACKAGE_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/>
</Relationships>"""

DOCUMENT_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  {numbering_rel}
</Relationships>"""

NUMBERING_REL = (
    '<Relationship Id="rId1" '
    'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/numbering" '
    'Target="numbering.xml"/>'
)

NUMBERING_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:numbering xmlns:w="{W_NS}">
  <w:abstractNum w:abstractNumId="0">
    <w:lvl w:ilvl="0"><w:numFmt w:val="bullet"/><w:lvlText w:val="•"/></w:lvl>
    <w:lvl w:ilvl="1"><w:numFmt w:val="bullet"/><w:lvlText w:val="○"/></w:lvl>
  </w:abstractNum>
  <w:abstractNum w:abstractNumId="1">
    <w:lvl w:ilvl="0"><w:numFmt w:val="decimal"/><w:lvlText w:val="%1."/></w:lvl>
    <w:lvl w:ilvl="1"><w:numFmt w:val="lowerLetter"/><w:lvlText w:val="%1.%2)"/></w:lvl>
    <w:lvl w:ilvl="2"><w:numFmt w:val="decimal"/><w:lvlText w:val=""/></w:lvl>
  </w:abstractNum>
  <w:num w:numId="1"><w:abstractNumId w:val="0"/></w:num>
  <w:num w:numId="2"><w:abstractNumId w:val="1"/></w:num>
  <w:num w:numId="3"><w:abstractNumId w:val="9"/></w:num>
</w:numbering>"""


def paragraph_xml(runs, num_id=None, ilvl=None):
    """
    <w:p> markup; runs are (text, bold) pairs.
    """
    ppr = ""
    if num_id is not None:
        ilvl_xml = f'<w:ilvl w:val="{ilvl}"/>' if ilvl is not None else ""
        ppr = f'<w:pPr><w:numPr>{ilvl_xml}<w:numId w:val="{num_id}"/></w:numPr></w:pPr>'
    run_xml = "".join(
        "<w:r>{}<w:t xml:space=\"preserve\">{}</w:t></w:r>".format(
            "<w:rPr><w:b/></w:rPr>" if bold else "", escape(text)
        )
        for text, bold in runs
    )
    return f"<w:p>{ppr}{run_xml}</w:p>"


def build_docx(paragraphs, with_numbering=True) -> bytes:
    body = "".join(paragraphs)
    document = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:document xmlns:w="{W_NS}"><w:body>{body}</w:body></w:document>'
    )

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("[Content_Types].xml", CONTENT_TYPES.format(
            numbering_override=NUMBERING_OVERRIDE if with_numbering else ""
        ))
        zf.writestr("_rels/.rels", PACKAGE_RELS)
        zf.writestr("word/document.xml", document)
        zf.writestr("word/_rels/document.xml.rels", DOCUMENT_RELS.format(
            numbering_rel=NUMBERING_REL if with_numbering else ""
        ))
        if with_numbering:
            zf.writestr("word/numbering.xml", NUMBERING_XML)
    return buffer.getvalue()


def truncated_document_docx() -> bytes:
    """Valid package whose word/document.xml is cut off mid-element."""
    source = zipfile.ZipFile(io.BytesIO(build_docx([paragraph_xml([("xin chào", False)])])))
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name in source.namelist():
            data = source.read(name)
            if name == "word/document.xml":
                data = data[:-20]
            zf.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def numbering_xml():
    return NUMBERING_XML


@pytest.fixture
def sample_docx():
    """Bulleted, numbered, plain, blank and heading paragraphs."""
    return build_docx([
        paragraph_xml([("hôm nay ", True), ("trời", False), (" đẹp.", False)], num_id="1", ilvl="0"),
        paragraph_xml([("mục thứ nhất", False)], num_id="2"),
        paragraph_xml([("đoạn văn Bình thường", False)]),
        paragraph_xml([("   ", False)]),
        paragraph_xml([("BÁO CÁO TỔNG KẾT", True)]),
    ])


@pytest.fixture
def plain_docx():
    return build_docx([paragraph_xml([("xin chào", False)])], with_numbering=False)
