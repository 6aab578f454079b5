"""Keyword-based transaction categorization."""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable

OTHER = "other"


@lru_cache(maxsize=None)
def _keyword_pattern(keyword: str) -> re.Pattern:
    # Keywords must start a word: "rent" matches "rent januari" and "rental",
    # never "current"
    return re.compile(r"(?<!\w)" + re.escape(keyword))


@dataclass(frozen=True)
class CategoryRule:
    """Map any of a set of lower-case keywords to a category tag."""

    category: str
    keywords: tuple[str, ...]

    def matches(self, description: str) -> bool:
        return any(_keyword_pattern(keyword).search(description) for keyword in self.keywords)


# Order matters: the first matching rule wins.
DEFAULT_RULES: tuple[CategoryRule, ...] = (
    CategoryRule("groceries", ("supermarkt", "grocery", "albert heijn", "jumbo", "lidl", "aldi")),
    CategoryRule("dining", ("restaurant", "cafe", "dining", "thuisbezorgd", "mcdonald", "starbucks")),
    CategoryRule("transport", ("fuel", "shell", "esso", "tankstation", "ns groep", "ov-chipkaart", "uber", "parking")),
    CategoryRule("housing", ("rent", "huur", "mortgage", "hypotheek")),
    CategoryRule("salary", ("salary", "salaris", "loon", "income")),
    CategoryRule("entertainment", ("netflix", "spotify", "subscription", "cinema", "disney+")),
    CategoryRule("utilities", ("eneco", "vattenfall", "essent", "ziggo", "kpn", "vodafone", "waternet", "energie")),
    CategoryRule("healthcare", ("apotheek", "pharmacy", "zorgverzekering", "huisarts", "tandarts", "hospital")),
    CategoryRule("shopping", ("bol.com", "amazon", "zalando", "hema", "ikea")),
)

# Tags accepted from any extraction path.
CATEGORIES = frozenset(
    [rule.category for rule in DEFAULT_RULES] + ["education", "travel", OTHER]
)


def categorize(description: str, rules: Iterable[CategoryRule] = DEFAULT_RULES) -> str:
    """Return the category of the first rule matching the description.

    Matching is case-insensitive and a keyword must start at a word
    boundary. Falls back to ``other`` when no rule matches or the
    description is empty.
    """
    if not description:
        return OTHER
    lowered = description.lower()
    for rule in rules:
        if rule.matches(lowered):
            return rule.category
    return OTHER


class Categorizer:
    """Categorizer bound to an ordered rule table."""

    def __init__(self, rules: Iterable[CategoryRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    def categorize(self, description: str) -> str:
        return categorize(description, self.rules)

    def with_rules(self, extra: Iterable[CategoryRule]) -> "Categorizer":
        """Return a categorizer with ``extra`` appended after existing rules."""
        return Categorizer(self.rules + tuple(extra))
