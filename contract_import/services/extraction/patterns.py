"""Rule primitives shared by the contract text extractors.

A field is described by a :class:`FieldRule`: an ordered tuple of
:class:`PatternRule` templates plus a search scope. Scoped fields first
locate a :class:`Section` (a heading and a bounded window after it) and
only then run their patterns against that window. The first template whose
post-processed value is not None wins.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Optional, Pattern, Tuple

from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)

# dd/mm/yyyy or dd-mm-yyyy
DATE = r"\d{1,2}[/\-]\d{1,2}[/\-]\d{4}"
EMAIL = r"[\w.+\-]+@[\w\-]+(?:\.[\w\-]+)+"
# A number followed by an optional money unit: "50.000 đồng", "1,5 triệu", "30k".
AMOUNT = r"(\d[\d.,]*)\s*(triệu|nghìn|ngàn|k\b|đồng|vnđ|vnd|đ\b)?"
RATE = r"(\d+(?:[.,]\d+)?)"
# A multiplier that is not the leading part of a percentage such as "150%".
BARE_RATE = RATE + r"(?![\d.,]*\s*%)"

UNIT_MULTIPLIERS = {
    "k": Decimal(1_000),
    "nghìn": Decimal(1_000),
    "ngàn": Decimal(1_000),
    "triệu": Decimal(1_000_000),
}

_THOUSANDS = re.compile(r"\d{1,3}(?:[.,]\d{3})+")


class Scope(Enum):
    """Where a field's patterns are matched."""

    WHOLE_TEXT = "whole_text"
    SECTION = "section"
    SECTION_OR_WHOLE_TEXT = "section_or_whole_text"


def first_group(match: "re.Match[str]") -> Optional[str]:
    value = match.group(1)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class PatternRule:
    """A regular expression and the function turning its match into a value."""

    pattern: str
    postprocess: Callable[["re.Match[str]"], Any] = first_group
    flags: int = re.IGNORECASE
    _regex: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_regex", re.compile(self.pattern, self.flags))

    def apply(self, text: str) -> Any:
        match = self._regex.search(text)
        if match is None:
            return None
        return self.postprocess(match)


@dataclass(frozen=True)
class Section:
    """A heading and the window of text following it.

    Args:
        markers: Heading patterns tried in order.
        window: Characters kept after the heading; None keeps the rest of the text.
        end_marker: Pattern that closes the section early (e.g. the next article).
    """

    markers: Tuple[str, ...]
    window: Optional[int] = None
    end_marker: Optional[str] = None

    def locate(self, text: str) -> Optional[str]:
        for marker in self.markers:
            match = re.search(marker, text, re.IGNORECASE)
            if match is None:
                continue
            start = match.end()
            body = text[start:] if self.window is None else text[start:start + self.window]
            if self.end_marker:
                end = re.search(self.end_marker, body, re.IGNORECASE)
                if end is not None:
                    body = body[:end.start()]
            return body
        return None


@dataclass(frozen=True)
class FieldRule:
    """Ordered pattern templates for one logical field."""

    name: str
    patterns: Tuple[PatternRule, ...]
    scope: Scope = Scope.WHOLE_TEXT
    section: Optional[Section] = None

    def extract(self, text: str) -> Any:
        """Run the two-phase search and return the first non-None value.

        Args:
            text: Full document text

        Returns:
            Post-processed value or None when nothing matched
        """
        if not text:
            return None

        haystack = text
        if self.scope is not Scope.WHOLE_TEXT and self.section is not None:
            body = self.section.locate(text)
            if body is None and self.scope is Scope.SECTION:
                LOGGER.debug(f"Section for {self.name} not found", extra={"field": self.name})
                return None
            if body is not None:
                haystack = body

        for index, rule in enumerate(self.patterns):
            value = rule.apply(haystack)
            if value is not None:
                LOGGER.debug(
                    f"Matched {self.name} with template {index}",
                    extra={"field": self.name, "template": index},
                )
                return value
        return None


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a day-first ``dd/mm/yyyy`` (or dash separated) date."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip().replace("-", "/"), "%d/%m/%Y").date()
    except ValueError:
        return None


def parse_clock(hour: Optional[str], minute: Optional[str]) -> Optional[time]:
    """Build a time from captured hour/minute strings; minutes default to 00."""
    if hour is None:
        return None
    h = int(hour)
    m = int(minute) if minute else 0
    if h > 23 or m > 59:
        return None
    return time(h, m)


def parse_decimal(value: Optional[str]) -> Optional[Decimal]:
    """Parse a rate such as ``1.5`` or ``1,5``."""
    if not value:
        return None
    try:
        return Decimal(value.strip().replace(",", "."))
    except InvalidOperation:
        return None


def parse_amount(number: Optional[str], unit: Optional[str] = None) -> Optional[Decimal]:
    """Parse a money amount, stripping thousands separators and applying units.

    ``50.000`` and ``50,000`` are fifty thousand; ``1,5 triệu`` is one and a
    half million; ``30k`` is thirty thousand.
    """
    if not number:
        return None
    cleaned = number.strip().rstrip(".,")
    if _THOUSANDS.fullmatch(cleaned):
        cleaned = cleaned.replace(".", "").replace(",", "")
    else:
        cleaned = cleaned.replace(",", ".")
        if cleaned.count(".") > 1:
            cleaned = cleaned.replace(".", "")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    multiplier = UNIT_MULTIPLIERS.get((unit or "").strip().lower())
    if multiplier is not None:
        amount *= multiplier
    return amount


def as_int(match: "re.Match[str]") -> Optional[int]:
    value = first_group(match)
    return int(value) if value is not None and value.isdigit() else None


def as_decimal(match: "re.Match[str]") -> Optional[Decimal]:
    return parse_decimal(match.group(1))


def as_percent_ratio(match: "re.Match[str]") -> Optional[Decimal]:
    """``150%`` becomes ``1.5``."""
    value = parse_decimal(match.group(1))
    return value / Decimal(100) if value is not None else None


def as_amount(match: "re.Match[str]") -> Optional[Decimal]:
    return parse_amount(match.group(1), match.group(2))


def as_date_range(match: "re.Match[str]") -> Optional[Tuple[date, date]]:
    start, end = parse_date(match.group(1)), parse_date(match.group(2))
    if start is None or end is None:
        return None
    return start, end


def constant(value: Any) -> Callable[["re.Match[str]"], Any]:
    """Post-processor that ignores the match and returns a fixed value."""
    return lambda match: value


def stripped(trailing: str) -> Callable[["re.Match[str]"], Optional[str]]:
    """Post-processor that removes a trailing fragment from the first group."""
    regex = re.compile(trailing, re.IGNORECASE)

    def _postprocess(match: "re.Match[str]") -> Optional[str]:
        value = first_group(match)
        if value is None:
            return None
        value = regex.sub("", value).strip()
        return value or None

    return _postprocess


def rate_rules(subject: str) -> Tuple[PatternRule, ...]:
    """Multiplier templates for a subject phrase on the same line.

    Matches "<subject> ... hệ số 1.5", "<subject> ... 150%" and
    "<subject> ... x2".
    """
    return (
        PatternRule(subject + r"[^\n]*?(?:hệ\s*số|tỷ\s*lệ|mức\s*lương|lương)\s*(?:là\s*|bằng\s*)?" + BARE_RATE, as_decimal),
        PatternRule(subject + r"[^\n]*?(\d{2,3}(?:[.,]\d+)?)\s*%", as_percent_ratio),
        PatternRule(subject + r"[^\n]*?\bx\s*" + BARE_RATE, as_decimal),
    )


def amount_rules(subject: str) -> Tuple[PatternRule, ...]:
    """Money templates for a subject phrase followed by an amount on the same line."""
    return (PatternRule(subject + r"[^\d\n]*?" + AMOUNT, as_amount),)
