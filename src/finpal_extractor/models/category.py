"""Category taxonomy and categorization rule models."""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from finpal_extractor.models.transaction import CategoryMethod, Confidence
from finpal_extractor.utils.logging_config import get_logger

logger = get_logger(__name__)

# Maximum pattern length to prevent overly complex patterns
MAX_PATTERN_LENGTH = 500

# Keys this short must match a whole word ("ola" must not hit "coca cola")
SHORT_KEY_LENGTH = 4

# Regex to detect nested quantifiers (catches (a+)+, ([a-z]+)+, (a+){2,} etc.)
_NESTED_QUANTIFIER_PATTERN = re.compile(
    r'\([^)]*[+*?][^)]*\)[+*?]|'
    r'\([^)]*[+*?][^)]*\)\{[0-9,]+\}'
)


def _is_safe_pattern(pattern: str) -> tuple[bool, str]:
    """Check if a regex pattern is safe from catastrophic backtracking.

    Args:
        pattern: Regex pattern string to validate.

    Returns:
        Tuple of (is_safe, reason if unsafe).
    """
    if len(pattern) > MAX_PATTERN_LENGTH:
        return False, f"Pattern exceeds {MAX_PATTERN_LENGTH} character limit"

    if _NESTED_QUANTIFIER_PATTERN.search(pattern):
        return False, "Pattern contains dangerous nested quantifier"

    return True, ""


def _compile_key(key: str) -> re.Pattern[str]:
    """Compile a merchant/keyword key into a word-anchored pattern.

    Short keys must match a whole word; longer keys only need to start
    at a word boundary, so "swiggy" still matches "swiggyinstamart".
    """
    escaped = re.escape(key.lower())
    if len(key) <= SHORT_KEY_LENGTH:
        return re.compile(rf"(?<![a-z0-9]){escaped}(?![a-z0-9])")
    return re.compile(rf"(?<![a-z0-9]){escaped}")


@dataclass(frozen=True)
class Category:
    """Taxonomy entry.

    Attributes:
        name: Canonical category name.
        icon: Display glyph.
        color: Display colour (hex).
        merchants: Known merchant substrings for this category.
        keywords: Generic keywords for this category.
    """

    name: str
    icon: str = "📄"
    color: str = "#6b7280"
    merchants: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Category":
        """Create a Category from a dictionary (e.g., from YAML config).

        Args:
            data: Dictionary containing category data.

        Returns:
            A new Category instance.
        """
        return cls(
            name=str(data["name"]),
            icon=str(data.get("icon", "📄")),
            color=str(data.get("color", "#6b7280")),
            merchants=tuple(str(m).lower() for m in data.get("merchants", None) or []),  # type: ignore[union-attr]
            keywords=tuple(str(k).lower() for k in data.get("keywords", None) or []),  # type: ignore[union-attr]
        )


@dataclass(frozen=True)
class KeyRule:
    """A merchant or keyword string mapped to a category."""

    key: str
    category: str
    pattern: re.Pattern[str] = field(repr=False, compare=False)

    def matches(self, text_lower: str) -> bool:
        return self.pattern.search(text_lower) is not None


@dataclass(frozen=True)
class SpecialRule:
    """Regex rule for cross-cutting categories (income, transfers, ATM, fees, EMI)."""

    category: str
    pattern: re.Pattern[str] = field(compare=False)

    @classmethod
    def compile(cls, category: str, pattern: str) -> Optional["SpecialRule"]:
        """Compile a special rule, rejecting unsafe or invalid patterns.

        Args:
            category: Category assigned on match.
            pattern: Regex pattern (matched case-insensitively).

        Returns:
            The rule, or None if the pattern was rejected.
        """
        is_safe, reason = _is_safe_pattern(pattern)
        if not is_safe:
            logger.warning(f"Rejecting unsafe pattern for '{category}': {reason}")
            return None
        try:
            return cls(category=category, pattern=re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            logger.warning(f"Invalid pattern for '{category}': {e}")
            return None


@dataclass(frozen=True)
class CategoryResult:
    """Outcome of categorizing one transaction."""

    category: str
    confidence: Confidence
    method: CategoryMethod
    icon: Optional[str] = None
    color: Optional[str] = None
    matched: Optional[str] = None


@dataclass(frozen=True)
class Taxonomy:
    """Immutable category taxonomy plus the rule tables derived from it.

    Built once at start-up and shared read-only by every categorizer.

    Attributes:
        categories: Categories in display order.
        aliases: Alternate name to canonical name.
        merchant_rules: Tier 1 rules, most specific (longest) key first.
        keyword_rules: Tier 2 rules, most specific (longest) key first.
        special_rules: Tier 3 rules in priority order.
        default_category: Category used when nothing else matches.
    """

    categories: tuple[Category, ...]
    aliases: Mapping[str, str]
    merchant_rules: tuple[KeyRule, ...]
    keyword_rules: tuple[KeyRule, ...]
    special_rules: tuple[SpecialRule, ...]
    default_category: str = "Others"

    @classmethod
    def build(
        cls,
        categories: list[Category],
        aliases: Mapping[str, str],
        special_patterns: list[tuple[str, str]],
        default_category: str = "Others",
    ) -> "Taxonomy":
        """Build a taxonomy and its derived rule tables.

        Args:
            categories: Categories in display order.
            aliases: Alternate name to canonical name.
            special_patterns: (category, regex) pairs for tier 3.
            default_category: Fallback category name.

        Returns:
            A new Taxonomy.
        """
        names = {c.name for c in categories}
        if default_category not in names:
            categories = [*categories, Category(name=default_category)]

        merchant_rules: list[KeyRule] = []
        keyword_rules: list[KeyRule] = []
        for category in categories:
            for key in category.merchants:
                merchant_rules.append(KeyRule(key, category.name, _compile_key(key)))
            for key in category.keywords:
                keyword_rules.append(KeyRule(key, category.name, _compile_key(key)))

        # Stable sort keeps category order among keys of equal length
        merchant_rules.sort(key=lambda r: len(r.key), reverse=True)
        keyword_rules.sort(key=lambda r: len(r.key), reverse=True)

        special_rules = []
        for category_name, pattern in special_patterns:
            rule = SpecialRule.compile(category_name, pattern)
            if rule is not None:
                special_rules.append(rule)

        return cls(
            categories=tuple(categories),
            aliases=MappingProxyType(dict(aliases)),
            merchant_rules=tuple(merchant_rules),
            keyword_rules=tuple(keyword_rules),
            special_rules=tuple(special_rules),
            default_category=default_category,
        )

    @classmethod
    def default(cls) -> "Taxonomy":
        """Build the taxonomy shipped with the package."""
        from finpal_extractor.tables import (
            CATEGORY_ALIASES,
            DEFAULT_CATEGORIES,
            OTHERS_CATEGORY,
            SPECIAL_PATTERNS,
        )

        return cls.build(
            categories=[Category.from_dict(c) for c in DEFAULT_CATEGORIES],
            aliases=CATEGORY_ALIASES,
            special_patterns=SPECIAL_PATTERNS,
            default_category=OTHERS_CATEGORY,
        )

    @property
    def category_names(self) -> list[str]:
        return [c.name for c in self.categories]

    def resolve_name(self, name: str) -> Optional[str]:
        """Resolve a name or alias to a canonical category name.

        Matching is case-insensitive.

        Args:
            name: Category name or alias.

        Returns:
            Canonical name, or None if unknown.
        """
        wanted = name.strip().lower()
        if not wanted:
            return None
        for category in self.categories:
            if category.name.lower() == wanted:
                return category.name
        for alias, canonical in self.aliases.items():
            if alias.lower() == wanted:
                return canonical
        return None

    def get(self, name: str) -> Category:
        """Get category metadata, falling back to the default category.

        Args:
            name: Category name or alias.

        Returns:
            The matching Category, or the default one.
        """
        canonical = self.resolve_name(name) or self.default_category
        for category in self.categories:
            if category.name == canonical:
                return category
        return Category(name=self.default_category)
