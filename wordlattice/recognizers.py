"""
Rule-based named entity recognizer stages.

These add candidate vertices for person names, place names and
organization names. They only add vertices, so coverage is never at risk;
whether a candidate ends up in the output is up to the path selector.

Examples of candidates added:
- 王小明 (nr): surname 王 + given name 小明
- 海淀区 (ns): 海淀 + place suffix 区
- 北京大学 (nt): 北京 + organization suffix 大学
"""

from typing import FrozenSet

from wordlattice.characters import is_cjk, is_numeral
from wordlattice.lattice import Wordnet

# ============================================================================
# Recognizer Data
# ============================================================================

SINGLE_SURNAMES: FrozenSet[str] = frozenset(
    "王李张刘陈杨黄赵吴周徐孙马朱胡郭何高林罗郑梁谢宋唐许韩冯邓曹彭曾肖田董"
    "袁潘于蒋蔡余杜叶程苏魏吕丁任沈姚卢姜崔钟谭陆汪范金石廖贾夏韦付方白邹孟"
    "熊秦邱江尹薛闫段雷侯龙史陶黎贺顾毛郝龚邵万钱严覃武戴莫孔向汤"
)

COMPOUND_SURNAMES: FrozenSet[str] = frozenset([
    '欧阳', '司马', '诸葛', '上官', '东方', '皇甫', '尉迟', '公孙', '慕容', '令狐',
    '夏侯', '长孙', '宇文', '司徒', '轩辕',
])

# Characters that practically never appear in a given name
NAME_STOP_CHARS: FrozenSet[str] = frozenset(
    "的了是在和与或也都就不这那我你他她它们个有说为对把被从到向着过吗呢吧啊"
)

PLACE_SUFFIXES: FrozenSet[str] = frozenset("省市县区镇乡村州路街巷湾岛山河湖港")

ORGANIZATION_SUFFIXES = (
    '委员会', '研究院', '研究所', '有限公司', '公司', '集团', '大学', '学院',
    '中学', '小学', '银行', '医院', '协会', '学会', '基金会', '出版社', '电视台',
    '部', '局', '厅', '署', '委',
)

TAG_PERSON = "nr"
TAG_PLACE = "ns"
TAG_ORGANIZATION = "nt"

# Frequencies given to recognized candidates
PERSON_WEIGHT = 50.0
PLACE_WEIGHT = 80.0
ORGANIZATION_WEIGHT = 80.0

MAX_PLACE_NAME_LENGTH = 4


def _name_char(char: str) -> bool:
    return is_cjk(char) and char not in NAME_STOP_CHARS and not is_numeral(char)


def _is_noun_tag(tag: str) -> bool:
    return tag.startswith("n") and tag != "nx"


# ============================================================================
# Recognizers
# ============================================================================

class PersonRecognizer:
    """Surname followed by a one- or two-character given name."""

    name = "person"

    def apply(self, wordnet: Wordnet) -> None:
        text = wordnet.text
        n = len(text)
        for p in range(n):
            if text[p:p + 2] in COMPOUND_SURNAMES:
                surname_end = p + 2
            elif text[p] in SINGLE_SURNAMES:
                surname_end = p + 1
            else:
                continue
            for given in (1, 2):
                end = surname_end + given
                if end > n or not all(_name_char(c) for c in text[surname_end:end]):
                    break
                if not wordnet.has_span(p, end):
                    wordnet.add_span(p, end, PERSON_WEIGHT, TAG_PERSON, source=self.name)


class PlaceRecognizer:
    """A noun (or a short unknown CJK run) followed by a place suffix."""

    name = "place"

    def apply(self, wordnet: Wordnet) -> None:
        text = wordnet.text
        for s, char in enumerate(text):
            if char not in PLACE_SUFFIXES or s == 0:
                continue
            end = s + 1
            for v in wordnet.ending_at(s):
                if v.length > MAX_PLACE_NAME_LENGTH or not all(is_cjk(c) for c in v.word):
                    continue
                if (_is_noun_tag(v.tag) or v.source == "fallback") and not wordnet.has_span(v.begin, end):
                    wordnet.add_span(v.begin, end, PLACE_WEIGHT, TAG_PLACE, source=self.name)


class OrganizationRecognizer:
    """One or two nouns followed by an organization suffix word."""

    name = "organization"

    def apply(self, wordnet: Wordnet) -> None:
        text = wordnet.text
        n = len(text)
        for s in range(1, n):
            for suffix in ORGANIZATION_SUFFIXES:
                if not text.startswith(suffix, s):
                    continue
                end = s + len(suffix)
                for v in wordnet.ending_at(s):
                    if not _is_noun_tag(v.tag):
                        continue
                    self._add(wordnet, v.begin, end)
                    for u in wordnet.ending_at(v.begin):
                        if _is_noun_tag(u.tag):
                            self._add(wordnet, u.begin, end)
                break

    def _add(self, wordnet: Wordnet, begin: int, end: int) -> None:
        if not wordnet.has_span(begin, end):
            wordnet.add_span(begin, end, ORGANIZATION_WEIGHT, TAG_ORGANIZATION, source=self.name)
