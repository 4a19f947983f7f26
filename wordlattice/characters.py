"""
Character classification for wordlattice.

Provides the character classes used by the lattice builder (to tag
single-character fallback vertices) and by the merging stages (to find
digit, letter and numeral runs).
"""

import unicodedata

# ============================================================================
# Character Tables
# ============================================================================

# Chinese numeral characters, including financial forms
CHINESE_DIGITS = "零〇一二两三四五六七八九壹贰叁肆伍陆柒捌玖"
CHINESE_UNITS = "十拾百佰千仟万萬亿億兆"
CHINESE_NUMERALS = frozenset(CHINESE_DIGITS + CHINESE_UNITS)

# Characters allowed inside (not at the edges of) a letter/digit run
RUN_JOINERS = frozenset(".-_+#")

# Decimal separators allowed inside a numeral
DECIMAL_POINTS = frozenset(".．点")

# Tags given to single-character fallback vertices
TAG_PUNCTUATION = "w"
TAG_NUMERAL = "m"
TAG_LETTERS = "nx"
TAG_UNKNOWN = "x"


# ============================================================================
# Predicates
# ============================================================================

def is_whitespace(char: str) -> bool:
    return char.isspace()


def is_digit(char: str) -> bool:
    """ASCII, full-width or other Unicode decimal digit."""
    return char.isdecimal()


def is_latin(char: str) -> bool:
    """ASCII or full-width Latin letter."""
    return ("a" <= char <= "z" or "A" <= char <= "Z"
            or "ａ" <= char <= "ｚ" or "Ａ" <= char <= "Ｚ")


def is_chinese_numeral(char: str) -> bool:
    return char in CHINESE_NUMERALS


def is_numeral(char: str) -> bool:
    return is_digit(char) or is_chinese_numeral(char)


def is_cjk(char: str) -> bool:
    """CJK unified ideograph (basic block and extension A)."""
    code = ord(char)
    return 0x4E00 <= code <= 0x9FFF or 0x3400 <= code <= 0x4DBF


def is_punctuation(char: str) -> bool:
    category = unicodedata.category(char)
    return category.startswith("P") or category.startswith("S")


def is_word_char(char: str) -> bool:
    """Latin letter or decimal digit."""
    return is_latin(char) or is_digit(char)


def char_tag(char: str) -> str:
    """Tag for a single-character fallback vertex."""
    if is_whitespace(char) or is_punctuation(char):
        return TAG_PUNCTUATION
    if is_numeral(char):
        return TAG_NUMERAL
    if is_latin(char):
        return TAG_LETTERS
    return TAG_UNKNOWN


# ============================================================================
# Runs
# ============================================================================

def word_run_end(text: str, start: int) -> int:
    """
    End of a letter/digit run starting at start.

    Joiner characters (".", "-", "_", "+", "#") are kept when they sit
    between two word characters, so "3.14", "e-mail" and "C++"-like tokens
    stay whole. A trailing "+"/"#" is kept when it follows a letter ("C++",
    "C#").
    """
    n = len(text)
    end = start
    while end < n:
        char = text[end]
        if is_word_char(char):
            end += 1
        elif char in RUN_JOINERS and end > start:
            if end + 1 < n and is_word_char(text[end + 1]):
                end += 1
            elif char in "+#" and (is_latin(text[end - 1]) or text[end - 1] in "+#"):
                end += 1
            else:
                break
        else:
            break
    return end


def is_all_digits(text: str) -> bool:
    return (any(is_digit(c) for c in text)
            and all(is_digit(c) or c in DECIMAL_POINTS for c in text))
