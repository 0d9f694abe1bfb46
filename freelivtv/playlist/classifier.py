"""Rule tables that decide which playlist entries become catalog channels.

Every decision is an ordered table of ``(pattern, outcome)`` pairs evaluated
by :func:`first_match`; the first pattern that matches any of the supplied
texts wins. Inclusion consults the group table, then the name-prefix table.
The exclusion table is a veto applied after inclusion.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence, Tuple, TypeVar

from ..models import Category, ChannelDescriptor, Classification, QualityTier, RawEntry

O = TypeVar("O")
Rule = Tuple["re.Pattern[str]", O]


def _rules(table: Iterable[Tuple[str, O]], flags: int = re.IGNORECASE) -> Tuple[Rule, ...]:
    return tuple((re.compile(pattern, flags), outcome) for pattern, outcome in table)


# Exact group titles; the outcome is the priority rank.
GROUP_RULES = _rules(
    [
        (r"^FREE LIV TV \|\| TAMIL$", 1),
        (r"^FREE LIV TV \|\| TAMIL HD$", 2),
        (r"^FREE LIV TV \|\| TAMIL MOVIES$", 3),
        (r"^FREE LIV TV \|\| TAMIL NEWS$", 4),
        (r"^FREE LIV TV \|\| CRICKET$", 5),
    ],
    flags=0,
)

NAME_RULES = _rules(
    [
        (r"^TM\s*[:|]", 6),
        (r"^CRIC\s*\|\|", 7),
        (r"^(TAMIL|TA)\s*(:|\|)", 8),
        (r"^24\s*[x/]\s*7\b.*\btamil\b", 9),
        (r"^(movies?|cinema|music|news|comedy|kids)\b.*\btamil\b", 10),
    ]
)

EXCLUDE_RULES = _rules(
    [
        (r"\b(hindi|telugu|malayalam|kannada|bangla|bengali|marathi|punjabi|gujarati|urdu|odia|oriya)\b", True),
        (r"\b(adult|xxx|porn)\b|\b18\+", True),
    ]
)

CATEGORY_RULES = _rules(
    [
        (r"cricket|^cric\s*\|\||\bipl\b|willow", Category.CRICKET),
        (r"movie|cinema|\bfilms?\b|\bktv\b", Category.MOVIES),
        (r"\bnews\b|seithigal", Category.NEWS),
        (r"music|\bisai\b|\bhits\b", Category.MUSIC),
        (r"kids|cartoon|chutti|pogo|\bnick\b|disney", Category.KIDS),
        (r"devotional|bhakti|bakthi|spiritual|aastha|sankara|\bsvbc\b", Category.DEVOTIONAL),
    ]
)

QUALITY_RULES = _rules(
    [
        (r"\b(4k|uhd|2160p?)\b", QualityTier.UHD_4K),
        (r"\b(fhd|full\s*hd|1080[pi]?)\b", QualityTier.FHD),
        (r"\b(hd|720p?)\b", QualityTier.HD),
    ]
)

NAME_DECORATIONS = (
    re.compile(r"^(TM|TA|TAMIL)\s*(:|\|\|?)\s*", re.IGNORECASE),
    re.compile(r"^CRIC\s*\|\|\s*", re.IGNORECASE),
    re.compile(r"\[[^\]]*\]"),
    re.compile(r"[|]+"),
)
WHITESPACE_RE = re.compile(r"\s+")


def first_match(rules: Sequence[Rule], *texts: str) -> Optional[O]:
    """Returns the outcome of the first rule matching any of ``texts``."""

    for pattern, outcome in rules:
        if any(text and pattern.search(text) for text in texts):
            return outcome
    return None


def clean_name(name: str) -> str:
    """Strips decorative markers and collapses whitespace for display."""

    cleaned = name
    for pattern in NAME_DECORATIONS:
        cleaned = pattern.sub(" ", cleaned)
    cleaned = WHITESPACE_RE.sub(" ", cleaned).strip(" -:")
    return cleaned or name.strip()


class ChannelClassifier:
    """Applies the inclusion, exclusion, category and quality tables."""

    def __init__(
        self,
        group_rules: Sequence[Rule] = GROUP_RULES,
        name_rules: Sequence[Rule] = NAME_RULES,
        exclude_rules: Sequence[Rule] = EXCLUDE_RULES,
        category_rules: Sequence[Rule] = CATEGORY_RULES,
        quality_rules: Sequence[Rule] = QUALITY_RULES,
    ) -> None:
        self.group_rules = group_rules
        self.name_rules = name_rules
        self.exclude_rules = exclude_rules
        self.category_rules = category_rules
        self.quality_rules = quality_rules

    def priority_for(self, entry: RawEntry) -> Optional[int]:
        rank = first_match(self.group_rules, entry.group)
        if rank is None:
            rank = first_match(self.name_rules, entry.name)
        return rank

    def is_vetoed(self, entry: RawEntry) -> bool:
        return bool(first_match(self.exclude_rules, entry.name, entry.group))

    def classify(self, entry: RawEntry) -> Classification:
        priority = self.priority_for(entry)
        if priority is None or self.is_vetoed(entry):
            return Classification(include=False)

        category = first_match(self.category_rules, entry.name, entry.group) or Category.ENTERTAINMENT
        quality = first_match(self.quality_rules, entry.name, entry.group) or QualityTier.SD
        return Classification(include=True, category=category, quality=quality, priority=priority)

    def describe(self, entry: RawEntry) -> Optional[ChannelDescriptor]:
        """Builds a descriptor for an included entry, ``None`` otherwise."""

        result = self.classify(entry)
        if not result.include:
            return None
        try:
            return ChannelDescriptor(
                display_name=entry.name,
                clean_name=clean_name(entry.name),
                category=result.category,
                quality=result.quality,
                origin_url=entry.url,
                logo_url=entry.logo or None,
                group_label=entry.group,
                priority=result.priority,
            )
        except ValueError:
            # unsupported URL scheme
            return None
