"""Article reference extraction and digit-script normalisation.

Queries name articles in several ways:

- "المادة 27", "مادة ٢٧", "المادة رقم 27"
- "article 27", "art. ٢٧", "art 27", "article 27th", "the 27th article"
- "المادة (27)", "article (27)"
- "المادة السابعة والعشرين", "the twenty-seventh article"

All of them resolve to the canonical ASCII number "27", which is what article
lookup compares against (exact string match, never numeric compare).
"""

import re
from dataclasses import dataclass

ASCII_DIGITS = "0123456789"
ARABIC_INDIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
EXTENDED_ARABIC_INDIC_DIGITS = "۰۱۲۳۴۵۶۷۸۹"

_TO_ASCII = str.maketrans(
    ARABIC_INDIC_DIGITS + EXTENDED_ARABIC_INDIC_DIGITS, ASCII_DIGITS + ASCII_DIGITS
)
_TO_ARABIC_INDIC = str.maketrans(ASCII_DIGITS, ARABIC_INDIC_DIGITS)

_DIGITS = f"[{ASCII_DIGITS}{ARABIC_INDIC_DIGITS}{EXTENDED_ARABIC_INDIC_DIGITS}]+"

_ARABIC_UNITS = [
    "الأولى",
    "الثانية",
    "الثالثة",
    "الرابعة",
    "الخامسة",
    "السادسة",
    "السابعة",
    "الثامنة",
    "التاسعة",
]
_ENGLISH_UNITS = [
    "first",
    "second",
    "third",
    "fourth",
    "fifth",
    "sixth",
    "seventh",
    "eighth",
    "ninth",
]
_ENGLISH_TEENS = [
    "eleventh",
    "twelfth",
    "thirteenth",
    "fourteenth",
    "fifteenth",
    "sixteenth",
    "seventeenth",
    "eighteenth",
    "nineteenth",
]

# Highest ordinal observed in the statute corpus
MAX_ORDINAL = 27


def _build_arabic_ordinals() -> dict[str, str]:
    ordinals: dict[str, str] = {}
    for n, word in enumerate(_ARABIC_UNITS, start=1):
        ordinals[word] = str(n)
    ordinals["الاولى"] = "1"
    ordinals["العاشرة"] = "10"

    for n, word in enumerate(_ARABIC_UNITS, start=11):
        unit = "الحادية" if n == 11 else word
        ordinals[f"{unit} عشرة"] = str(n)
        ordinals[f"{unit} عشر"] = str(n)

    ordinals["العشرون"] = "20"
    ordinals["العشرين"] = "20"
    for n, word in enumerate(_ARABIC_UNITS[: MAX_ORDINAL - 20], start=21):
        unit = "الحادية" if n == 21 else word
        ordinals[f"{unit} والعشرون"] = str(n)
        ordinals[f"{unit} والعشرين"] = str(n)
    return ordinals


def _build_english_ordinals() -> dict[str, str]:
    ordinals: dict[str, str] = {}
    for n, word in enumerate(_ENGLISH_UNITS, start=1):
        ordinals[word] = str(n)
    ordinals["tenth"] = "10"
    for n, word in enumerate(_ENGLISH_TEENS, start=11):
        ordinals[word] = str(n)
    ordinals["twentieth"] = "20"
    for n, word in enumerate(_ENGLISH_UNITS[: MAX_ORDINAL - 20], start=21):
        ordinals[f"twenty {word}"] = str(n)
    return ordinals


ARABIC_ORDINALS = _build_arabic_ordinals()
ENGLISH_ORDINALS = _build_english_ordinals()


def _alternation(words: dict[str, str], *, hyphen: bool = False) -> str:
    # Longest first so "الثانية عشرة" wins over "الثانية"
    separator = r"[\s\-]+" if hyphen else r"\s+"
    parts = []
    for word in sorted(words, key=len, reverse=True):
        parts.append(separator.join(re.escape(piece) for piece in word.split(" ")))
    return "|".join(parts)


_SUFFIX = r"(?:st|nd|rd|th)?"

_ARABIC_ARTICLE = re.compile(
    rf"(?:ال)?مادة\s*(?:رقم\s*)?\(?\s*(?P<num>{_DIGITS}|{_alternation(ARABIC_ORDINALS)})"
)
_ENGLISH_ARTICLE = re.compile(
    rf"\b(?:article|art\.?)\s*(?:no\.?\s*)?\(?\s*"
    rf"(?P<num>{_DIGITS}|{_alternation(ENGLISH_ORDINALS, hyphen=True)}){_SUFFIX}\b",
    re.IGNORECASE,
)
_ENGLISH_ORDINAL_ARTICLE = re.compile(
    rf"\b(?P<num>{_alternation(ENGLISH_ORDINALS, hyphen=True)})\s+article\b",
    re.IGNORECASE,
)
# "the 27th article"; the suffix is required so "law 27 article" stays unmatched
_ENGLISH_NUMBERED_ARTICLE = re.compile(
    rf"\b(?P<num>{_DIGITS})(?:st|nd|rd|th)\s+article\b",
    re.IGNORECASE,
)

_ARTICLE_PATTERNS = (
    _ARABIC_ARTICLE,
    _ENGLISH_ARTICLE,
    _ENGLISH_ORDINAL_ARTICLE,
    _ENGLISH_NUMBERED_ARTICLE,
)

# A query made of nothing but a number is read as an article number
_BARE_NUMBER = re.compile(rf"(?P<num>{_DIGITS})")


@dataclass(frozen=True)
class ArticleRef:
    """Article number named in a query."""

    number: str  # canonical ASCII digits
    raw: str  # text as written in the query


def to_ascii_digits(text: str) -> str:
    """Rewrite Arabic-Indic and extended Arabic-Indic digits as ASCII."""
    return text.translate(_TO_ASCII)


def to_arabic_indic_digits(text: str) -> str:
    """Rewrite ASCII digits as Arabic-Indic digits."""
    return text.translate(_TO_ARABIC_INDIC)


def _canonical_number(raw: str) -> str | None:
    digits = to_ascii_digits(raw)
    if digits.isascii() and digits.isdigit():
        return digits

    words = " ".join(re.split(r"[\s\-]+", raw.strip()))
    return ARABIC_ORDINALS.get(words) or ENGLISH_ORDINALS.get(words.lower())


def extract_article_ref(text: str) -> ArticleRef | None:
    """Find the first "(article-word) (number)" reference in ``text``.

    A text consisting only of digits (any script) also counts as a reference.
    Returns None when the text names no article; this is not an error.
    """
    best: re.Match[str] | None = None
    for pattern in _ARTICLE_PATTERNS:
        match = pattern.search(text)
        if match and (best is None or match.start() < best.start()):
            best = match

    if best is None:
        best = _BARE_NUMBER.fullmatch(text.strip())
    if best is None:
        return None

    raw = best.group("num")
    number = _canonical_number(raw)
    if number is None:
        return None
    return ArticleRef(number=number, raw=raw)


def article_keyword_variants(query: str) -> list[str]:
    """Spelling variants of the "article" keyword found in ``query``.

    Arabic writes the word with or without the definite article
    ("المادة" / "مادة"); English uses "article" and the abbreviation "art.".
    Returned variants differ from ``query``; duplicates are dropped.
    """
    candidates = [
        query.replace("المادة", "مادة"),
        re.sub(r"(?<!ال)مادة", "المادة", query),
        re.sub(r"\barticle\b", "art.", query, flags=re.IGNORECASE),
        re.sub(r"\bart\.?(?=\s*\(?\s*\d)", "article", query, flags=re.IGNORECASE),
    ]

    variants: list[str] = []
    for candidate in candidates:
        if candidate != query and candidate not in variants:
            variants.append(candidate)
    return variants
