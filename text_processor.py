"""
Text Processor - Vietnamese capitalization and bullet normalization

Fixes, line by line:
1. Bullet glyphs (•, ●, ◆, ○ ...) → "- " / "+) "
2. Mixed-case corruption ("KHông" → "không")
3. ALL-CAPS words inside normal sentences ("BÁO CÁO" → "báo cáo")
4. Stray Title-Case words that are not proper names
5. Sentence-start capitalization (after ". ! ?" and list markers)

Headings (almost entirely uppercase lines) are left untouched.

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional

# =============================================================================
# LEXICAL TABLES
# =============================================================================

# Administrative / education abbreviations that must keep their case
WHITELIST_ACRONYMS = frozenset({
    'KHBG', 'ĐGTX', 'NCBH', 'HSG', 'CSDL', 'KTTX', 'THPT',
    'GDĐT', 'UBND', 'HĐND', 'BGD', 'SỞ', 'PHÒNG', 'THCS', 'TP', 'VN', 'SGK',
    'GV', 'HS', 'BGH', 'CMHS', 'CNTT',
})

ROMAN_NUMERALS = re.compile(
    r'^(I|II|III|IV|V|VI|VII|VIII|IX|X|XI|XII|XIII|XIV|XV|XVI|XVII|XVIII|XIX|XX)$'
)

BULLET_DASH_GROUP = re.compile(r'^[•●⚫◆▪■▸►]\s*')
BULLET_PLUS_GROUP = re.compile(r'^[○◦]\s*')

# "-", "+", "*", "•", "+)", "1.", "2)", "a.", "b)", "IV."
MARKER_REGEX = re.compile(r'^([-+*•]|\+\)|[0-9]+[.)]|[a-zA-Z][.)]|[IVXLCDM]+[.)])$')

SENTENCE_END = ('.', '!', '?')

# Word characters include combining diacritics so NFD input keeps one core
_WORD_CHARS = r'\w\u0300-\u036f'
WORD_SPLIT = re.compile(rf'^([^{_WORD_CHARS}]*)([{_WORD_CHARS}]+)([^{_WORD_CHARS}]*)$')
WORD_CORE = re.compile(rf'[{_WORD_CHARS}]+')
LEADING_WS = re.compile(r'^\s+')

# Heading detection
TITLE_UPPER_RATIO = 0.9
TITLE_MIN_LENGTH = 5


# =============================================================================
# CLASSIFIERS
# =============================================================================

def is_whitelisted_acronym(word: str) -> bool:
    """True if the word is a whitelisted acronym written in capitals."""
    upper = word.upper()
    return word == upper and upper in WHITELIST_ACRONYMS


def is_roman_numeral(word: str) -> bool:
    return ROMAN_NUMERALS.match(word.upper()) is not None


def is_line_marker(word: str) -> bool:
    """True for list markers after which a new item starts."""
    return MARKER_REGEX.match(word) is not None


def has_sentence_end_punctuation(word: str) -> bool:
    return word.endswith(SENTENCE_END)


def _is_mixed_corrupted(core: str) -> bool:
    # Two or more capitals followed by lowercase only: "KHông", "THPt"
    i = 0
    while i < len(core) and core[i].isalpha() and core[i].isupper():
        i += 1
    rest = core[i:]
    return i >= 2 and bool(rest) and all(c.isalpha() and c.islower() for c in rest)


def _is_all_upper(core: str) -> bool:
    return len(core) >= 2 and all(c.isalpha() and c.isupper() for c in core)


def _is_title_case(core: str) -> bool:
    return (
        len(core) >= 2
        and core[0].isalpha() and core[0].isupper()
        and all(c.isalpha() and c.islower() for c in core[1:])
    )


def _starts_upper(word: str) -> bool:
    match = WORD_CORE.search(word)
    return bool(match) and match.group(0)[0].isupper()


def _is_title_line(content: str) -> bool:
    letters = [c for c in content if c.isalpha()]
    if not letters:
        return False
    upper = sum(1 for c in letters if c.isupper())
    return upper / len(letters) > TITLE_UPPER_RATIO and len(content) > TITLE_MIN_LENGTH


def _convert_bullet(content: str) -> str:
    if BULLET_DASH_GROUP.match(content):
        return BULLET_DASH_GROUP.sub('- ', content, count=1)
    if BULLET_PLUS_GROUP.match(content):
        return BULLET_PLUS_GROUP.sub('+) ', content, count=1)
    return content


# =============================================================================
# LINE NORMALIZATION
# =============================================================================

def _starts_sentence(words: List[str], i: int) -> bool:
    if i == 0:
        return True
    prev = words[i - 1]
    return has_sentence_end_punctuation(prev) or is_line_marker(prev)


def _is_likely_name(words: List[str], i: int, post_punct: str) -> bool:
    """
    Title-case word in the middle of a sentence: keep it if a neighbouring
    word is capitalized too (multi-word proper names such as "Nguyễn Văn An").
    """
    # Lookahead, only if this word does not close the sentence
    if i < len(words) - 1 and not any(p in post_punct for p in SENTENCE_END):
        if _starts_upper(words[i + 1]):
            return True

    # Lookbehind, ignoring a previous word that itself opens the sentence
    if i > 0 and not _starts_sentence(words, i - 1):
        if _starts_upper(words[i - 1]):
            return True

    return False


def _fix_word(words: List[str], i: int) -> str:
    word = words[i]
    match = WORD_SPLIT.match(word)
    if not match:
        return word

    pre_punct, core, post_punct = match.groups()

    if is_whitelisted_acronym(core) or is_roman_numeral(core):
        return word

    start_of_sentence = _starts_sentence(words, i)
    fixed = core

    if _is_mixed_corrupted(core):
        fixed = core.lower()
    elif _is_all_upper(core):
        fixed = core.lower()
    elif _is_title_case(core) and not start_of_sentence:
        if not _is_likely_name(words, i, post_punct):
            fixed = core.lower()

    # Sentence start is always capitalized, also after the lowercasing above
    if start_of_sentence and fixed:
        fixed = fixed[0].upper() + fixed[1:]

    return pre_punct + fixed + post_punct


def normalize_line(line: str) -> str:
    """
    Normalize a single line of Vietnamese text.

    Leading indentation is preserved verbatim, whitespace runs inside the
    line collapse to single spaces. Never raises.
    """
    if not line.strip():
        return line

    indent_match = LEADING_WS.match(line)
    indent = indent_match.group(0) if indent_match else ''
    content = _convert_bullet(line.strip())

    if _is_title_line(content):
        return indent + content

    words = content.split()
    corrected = [_fix_word(words, i) for i in range(len(words))]
    return indent + ' '.join(corrected)


def normalize_text(text: str) -> str:
    """Apply normalize_line to every line; line count is preserved."""
    if not text:
        return ''
    return '\n'.join(normalize_line(line) for line in text.split('\n'))


def get_stats(text: Optional[str]) -> Dict[str, int]:
    """Character and word counts for display."""
    if not text or not text.strip():
        return {"chars": 0, "words": 0}
    return {"chars": len(text), "words": len(text.split())}
