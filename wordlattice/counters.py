"""
Numeral and quantifier recognition for wordlattice.

A numeral (Arabic, full-width or Chinese digits) followed by a quantifier
forms a single candidate word:
- 三个 = 三 (three) + 个 (generic measure word)
- 5公斤 = 5 + 公斤 (kilogram)
- 二〇一八年 = 二〇一八 + 年 (year)

This module provides the parsing helpers used by the number/quantifier
merging stage.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from wordlattice.characters import DECIMAL_POINTS, is_digit
from wordlattice.trie import PrefixIndex


# ============================================================================
# Number Parsing
# ============================================================================

# Chinese digit to value mapping
CHINESE_DIGIT_VALUES: Dict[str, int] = {
    '零': 0, '〇': 0,
    '一': 1, '壹': 1,
    '二': 2, '两': 2, '贰': 2,
    '三': 3, '叁': 3,
    '四': 4, '肆': 4,
    '五': 5, '伍': 5,
    '六': 6, '陆': 6,
    '七': 7, '柒': 7,
    '八': 8, '捌': 8,
    '九': 9, '玖': 9,
}

# Small multipliers apply to the digit before them
CHINESE_SMALL_UNITS: Dict[str, int] = {
    '十': 10, '拾': 10,
    '百': 100, '佰': 100,
    '千': 1000, '仟': 1000,
}

# Large units close a section (一万二千 = 1*10000 + 2000)
CHINESE_LARGE_UNITS: Dict[str, int] = {
    '万': 10000, '萬': 10000,
    '亿': 100000000, '億': 100000000,
    '兆': 1000000000000,
}


def parse_number(text: str) -> Optional[float]:
    """
    Parse a numeral into its value.

    Supports:
    - Arabic numerals, half- or full-width (12, １２)
    - Decimals (3.14, ３．１４)
    - Chinese numerals (十二, 一百零三, 两万五千)
    - Digit-by-digit Chinese years (二〇一八)

    Returns None if the text is not a valid number.
    """
    if not text:
        return None

    if all(is_digit(c) or c in DECIMAL_POINTS for c in text):
        digits = ''.join('.' if c in DECIMAL_POINTS else str(int(c)) for c in text)
        if digits.count('.') > 1 or digits.startswith('.') or digits.endswith('.'):
            return None
        return float(digits) if '.' in digits else int(digits)

    return parse_chinese_number(text)


def parse_chinese_number(text: str) -> Optional[int]:
    """Parse a Chinese numeral string into an integer."""
    if not text:
        return None

    # 二〇一八 style: digits only, read positionally
    if len(text) > 1 and all(c in CHINESE_DIGIT_VALUES for c in text):
        value = 0
        for char in text:
            value = value * 10 + CHINESE_DIGIT_VALUES[char]
        return value

    total = 0
    section = 0
    current = 0

    for char in text:
        if char in CHINESE_DIGIT_VALUES:
            current = CHINESE_DIGIT_VALUES[char]
        elif char in CHINESE_SMALL_UNITS:
            # 十二 means 12: a bare unit implies a leading one
            section += (current or 1) * CHINESE_SMALL_UNITS[char]
            current = 0
        elif char in CHINESE_LARGE_UNITS:
            unit = CHINESE_LARGE_UNITS[char]
            total = (total + section + current) * unit if total < unit else total + (section + current) * unit
            section = 0
            current = 0
        else:
            return None

    return total + section + current


# ============================================================================
# Quantifier Data
# ============================================================================

# Common measure words and units. Dictionary words tagged "q" are accepted
# as quantifiers too.
QUANTIFIERS = frozenset([
    # Generic and object classifiers
    '个', '只', '本', '件', '条', '张', '位', '名', '把', '台', '辆', '架',
    '棵', '朵', '片', '块', '根', '支', '枝', '颗', '粒', '双', '对', '套',
    '份', '篇', '首', '部', '场', '次', '回', '遍', '顿', '层', '间', '座',
    '家', '所', '项', '种', '类', '批', '群', '堆', '杯', '瓶', '碗', '盒',
    '袋', '箱', '包', '口', '头', '匹', '尾', '封', '页', '行', '届', '期',
    # Time
    '年', '月', '日', '号', '天', '周', '岁', '时', '点', '分', '秒',
    '小时', '分钟', '星期', '世纪', '年代',
    # Money
    '元', '角', '毛', '美元', '欧元', '英镑', '日元', '块钱',
    # Measure
    '米', '厘米', '毫米', '公里', '千米', '里', '尺', '寸',
    '克', '千克', '公斤', '斤', '吨', '升', '毫升',
    '度', '倍', '成', '折', '%', '％',
])

MAX_QUANTIFIER_LENGTH = max(len(q) for q in QUANTIFIERS)

# Tags used on merged vertices
TAG_NUMERAL = "m"
TAG_QUANTIFIER = "q"
TAG_NUMERAL_QUANTIFIER = "mq"


@dataclass(slots=True)
class QuantifierExpression:
    """A recognized numeral + quantifier span."""
    text: str           # Full text (e.g., "三个")
    number: float       # Numeric value of the numeral part
    quantifier: str     # Quantifier part (e.g., "个")
    start: int          # Start position in the text
    numeral_end: int    # End of the numeral part
    end: int            # End position in the text


# ============================================================================
# Recognition
# ============================================================================

def is_numeral_start(text: str, pos: int) -> bool:
    """Check if a numeral could start at this position."""
    if pos >= len(text):
        return False
    char = text[pos]
    # Of the units only 十 may open a numeral (十二); 千米 is not a number
    return is_digit(char) or char in CHINESE_DIGIT_VALUES or char in ('十', '拾')


def find_numeral_end(text: str, start: int) -> int:
    """
    Find the end of the numeral starting at start (start itself if none).

    A numeral is either a run of Arabic digits with at most one inner decimal
    point, or a run of Chinese numeral characters. The two are not mixed.
    """
    n = len(text)
    end = start
    if start < n and is_digit(text[start]):
        seen_point = False
        while end < n:
            char = text[end]
            if is_digit(char):
                end += 1
            elif (char in DECIMAL_POINTS and not seen_point
                  and end + 1 < n and is_digit(text[end + 1])):
                seen_point = True
                end += 1
            else:
                break
        return end

    while end < n and (text[end] in CHINESE_DIGIT_VALUES
                       or text[end] in CHINESE_SMALL_UNITS
                       or text[end] in CHINESE_LARGE_UNITS):
        end += 1
    # A large unit can't start a numeral
    if end > start and text[start] in CHINESE_LARGE_UNITS:
        return start
    return end


def find_quantifier(text: str, pos: int, index: Optional[PrefixIndex] = None) -> int:
    """
    Length of the longest quantifier at pos, 0 if none.

    Checks the built-in table and, if given, dictionary words tagged "q".
    """
    best = 0
    for length in range(min(MAX_QUANTIFIER_LENGTH, len(text) - pos), 0, -1):
        if text[pos:pos + length] in QUANTIFIERS:
            best = length
            break
    if index is not None:
        for length, entry in index.scan_from(text, pos):
            if entry.tag == TAG_QUANTIFIER and length > best:
                best = length
    return best


def find_number_quantifier(
    text: str,
    start: int = 0,
    index: Optional[PrefixIndex] = None,
) -> Optional[QuantifierExpression]:
    """
    Try to find a numeral + quantifier expression starting at start.

    Returns:
        QuantifierExpression if found, None otherwise
    """
    if not is_numeral_start(text, start):
        return None

    numeral_end = find_numeral_end(text, start)
    if numeral_end == start:
        return None

    number = parse_number(text[start:numeral_end])
    if number is None:
        return None

    length = find_quantifier(text, numeral_end, index)
    if not length:
        return None

    end = numeral_end + length
    return QuantifierExpression(
        text=text[start:end],
        number=number,
        quantifier=text[numeral_end:end],
        start=start,
        numeral_end=numeral_end,
        end=end,
    )
