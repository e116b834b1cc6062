"""
Numbering Resolver - bullet glyphs from word/numbering.xml

Maps a paragraph's numbering reference (numId, ilvl) to a representative
bullet string:

    w:num/@w:numId  →  w:abstractNumId/@w:val
    w:abstractNum/@w:abstractNumId  →  w:lvl/@w:ilvl  →  w:lvlText/@w:val

Bullet levels keep their glyph. Ordered levels get their placeholders
("%1.", "%1.%2)") replaced by "1"; real sequential counters are not computed.

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Union

from docx.oxml.ns import qn

logger = logging.getLogger("vietcorrect.numbering")

LEVEL_PLACEHOLDER = re.compile(r'%\d')


def _frozen(mapping: Optional[dict] = None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class NumberingLookup:
    """Read-only numbering lookup, built once per document."""
    num_to_abstract: Mapping[str, str] = field(default_factory=_frozen)
    abstract_levels: Mapping[str, Mapping[str, str]] = field(default_factory=_frozen)

    def resolve_bullet(self, num_id: Optional[str], level: Union[str, int] = "0") -> Optional[str]:
        """Glyph or template for (numId, level), None when anything is unknown."""
        if num_id is None:
            return None
        abstract_id = self.num_to_abstract.get(str(num_id))
        if abstract_id is None:
            return None
        levels = self.abstract_levels.get(abstract_id)
        if levels is None:
            return None
        return levels.get(str(level))

    @property
    def is_empty(self) -> bool:
        return not self.num_to_abstract


EMPTY_LOOKUP = NumberingLookup()


def _child_val(element, tag: str) -> Optional[str]:
    child = element.find(qn(tag))
    if child is None:
        return None
    return child.get(qn("w:val"))


def build_numbering_lookup(numbering_element) -> NumberingLookup:
    """
    Build the lookup from a parsed <w:numbering> element.

    A missing numbering part (None) gives an empty lookup; numbering is an
    optional enhancement, never an error.
    """
    if numbering_element is None:
        return EMPTY_LOOKUP

    num_to_abstract = {}
    for num in numbering_element.iter(qn("w:num")):
        num_id = num.get(qn("w:numId"))
        abstract_id = _child_val(num, "w:abstractNumId")
        if num_id and abstract_id:
            num_to_abstract[num_id] = abstract_id

    abstract_levels = {}
    for abstract in numbering_element.iter(qn("w:abstractNum")):
        abstract_id = abstract.get(qn("w:abstractNumId"))
        if not abstract_id:
            continue

        levels = {}
        for lvl in abstract.iter(qn("w:lvl")):
            ilvl = lvl.get(qn("w:ilvl"))
            lvl_text = _child_val(lvl, "w:lvlText")
            if ilvl is None or not lvl_text:
                continue
            if _child_val(lvl, "w:numFmt") == "bullet":
                levels[ilvl] = lvl_text
            else:
                levels[ilvl] = LEVEL_PLACEHOLDER.sub("1", lvl_text)
        abstract_levels[abstract_id] = _frozen(levels)

    logger.debug(
        "Numbering parsed: %d instances, %d abstract definitions",
        len(num_to_abstract), len(abstract_levels)
    )
    return NumberingLookup(
        num_to_abstract=_frozen(num_to_abstract),
        abstract_levels=_frozen(abstract_levels),
    )


def resolve_bullet(lookup: Optional[NumberingLookup], num_id: Optional[str],
                   level: Union[str, int] = "0") -> Optional[str]:
    if lookup is None:
        return None
    return lookup.resolve_bullet(num_id, level)
