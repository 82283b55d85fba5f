"""
Keyword and rule-marker detection.

Rule markers are the numeric facts a regulatory rule is built from:
percentages, monetary amounts and grouped thresholds (500,000). Domain
keywords are the configured vocabulary (tax, exemption, bracket...).
Markers compare by numeric value so "24%" in text matches 24 or 0.24 in a
rule payload, and "Rs. 500,000" matches 500000.

Dependencies: re (stdlib), decimal (stdlib)
System role: Shared text signals for planner, scheduler and quality validator
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

_PERCENT = re.compile(r"(\d+(?:\.\d+)?)\s?(?:%|per\s?cent\b|percent\b)", re.IGNORECASE)
_AMOUNT = re.compile(
    r"(?:Rs\.?|LKR|USD|EUR|GBP|INR|\$|€|£)\s?(\d[\d,]*(?:\.\d+)?)",
    re.IGNORECASE,
)
_GROUPED = re.compile(r"(?<![\d.,])(\d{1,3}(?:,\d{3})+(?:\.\d+)?)(?![\d,])")
_NUMBER = re.compile(r"\d[\d,]*(?:\.\d+)?")


@dataclass(frozen=True)
class Marker:
    """Numeric rule marker. Equality ignores the surface form."""

    kind: str
    value: Decimal
    surface: str = field(compare=False)


@dataclass(frozen=True)
class KeywordProfile:
    """Domain terms and rule markers found in a text."""

    terms: frozenset[str]
    markers: frozenset[Marker]

    def keywords(self) -> set[str]:
        """Flat keyword set stored on chunks."""
        return set(self.terms) | {marker.surface for marker in self.markers}

    def __sub__(self, other: "KeywordProfile") -> "KeywordProfile":
        return KeywordProfile(self.terms - other.terms, self.markers - other.markers)

    def __len__(self) -> int:
        return len(self.terms) + len(self.markers)


@dataclass(frozen=True)
class PayloadSignals:
    """Flattened text and numbers of one or more rule payloads."""

    text: str
    numbers: frozenset[Decimal]


def _to_decimal(raw: str) -> Decimal | None:
    try:
        return Decimal(raw.replace(",", ""))
    except InvalidOperation:
        return None


def find_markers(text: str) -> set[Marker]:
    """
    Find rule markers in text.

    Args:
        text: Text to scan

    Returns:
        set[Marker]: Percentages, monetary amounts and grouped thresholds
    """
    markers: set[Marker] = set()
    claimed: list[tuple[int, int]] = []
    for kind, pattern in (("percent", _PERCENT), ("amount", _AMOUNT), ("threshold", _GROUPED)):
        for match in pattern.finditer(text):
            start, end = match.span(1)
            if any(start < c_end and c_start < end for c_start, c_end in claimed):
                continue
            value = _to_decimal(match.group(1))
            if value is None:
                continue
            claimed.append((start, end))
            markers.add(Marker(kind=kind, value=value, surface=match.group(0).strip()))
    return markers


def payload_signals(payloads: Iterable[dict[str, Any]]) -> PayloadSignals:
    """
    Flatten rule payloads into searchable text and a set of numbers.

    Numeric strings inside payloads ("500,000", "24%") contribute numbers too.
    """
    texts: list[str] = []
    numbers: set[Decimal] = set()

    def walk(value: Any) -> None:
        if isinstance(value, dict):
            for key, item in value.items():
                texts.append(str(key).replace("_", " "))
                walk(item)
        elif isinstance(value, (list, tuple, set)):
            for item in value:
                walk(item)
        elif isinstance(value, bool) or value is None:
            return
        elif isinstance(value, (int, float)):
            numbers.add(Decimal(str(value)))
        else:
            text = str(value)
            texts.append(text)
            for match in _NUMBER.finditer(text):
                parsed = _to_decimal(match.group(0))
                if parsed is not None:
                    numbers.add(parsed)

    for payload in payloads:
        walk(payload)
    return PayloadSignals(text=" ".join(texts).lower(), numbers=frozenset(numbers))


class KeywordExtractor:
    """Detects configured domain terms and rule markers."""

    def __init__(self, domain_keywords: Iterable[str]) -> None:
        self.domain_keywords = sorted({k.strip().lower() for k in domain_keywords if k.strip()})
        self._patterns = {
            keyword: re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)
            for keyword in self.domain_keywords
        }

    def find_terms(self, text: str) -> set[str]:
        """Domain keywords present in text (case-insensitive, whole words)."""
        return {keyword for keyword, pattern in self._patterns.items() if pattern.search(text)}

    def profile(self, text: str) -> KeywordProfile:
        """Terms and markers present in text."""
        return KeywordProfile(frozenset(self.find_terms(text)), frozenset(find_markers(text)))

    def context_keywords(self, text: str) -> set[str]:
        """Keyword set attached to a chunk."""
        return self.profile(text).keywords()

    @staticmethod
    def marker_reflected(marker: Marker, signals: PayloadSignals) -> bool:
        """Whether a marker's value appears in the payload numbers."""
        if marker.value in signals.numbers:
            return True
        return marker.kind == "percent" and marker.value / 100 in signals.numbers

    def term_reflected(self, term: str, signals: PayloadSignals) -> bool:
        """Whether a domain term appears in the payload text."""
        pattern = self._patterns.get(term) or re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)
        return bool(pattern.search(signals.text))

    def reflected_count(self, profile: KeywordProfile, signals: PayloadSignals) -> int:
        """Number of terms and markers of a profile that the payloads reflect."""
        terms = sum(1 for term in profile.terms if self.term_reflected(term, signals))
        markers = sum(1 for marker in profile.markers if self.marker_reflected(marker, signals))
        return terms + markers
