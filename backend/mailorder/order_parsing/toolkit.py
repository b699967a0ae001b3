"""
Shared Extraction Toolkit

Generic pieces every platform rule table runs through:
- Cascade evaluation (first validated match, priority order)
- Amount voting (highest priority, then highest magnitude)
- Identifier / amount / item-name validators
- Item deduplication by normalized name
- Static check for unbounded regex quantifiers
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from mailorder.models import LineItem

from .utilities import normalize_item_name, parse_amount


# Upper bound on matches examined per rule and source
MAX_MATCHES_PER_RULE = 50

# Tokens that show up when a pattern captures HTML/CSS instead of an id.
# Matched against the letter runs of an id: a run must equal a token, or
# contain one of at least four letters.
LEAKAGE_TOKENS = frozenset({
    'value', 'table', 'width', 'height', 'style', 'font', 'color',
    'border', 'padding', 'margin', 'align', 'class', 'http', 'www',
})
LETTER_RUN = re.compile(r'[a-z]{1,40}')

CSS_LEAKAGE = re.compile(r'background|url\(|\.css|\.js|font-family', re.IGNORECASE)
HEX_TOKEN = re.compile(r'^[a-f0-9]{8,}$', re.IGNORECASE)
NUMERIC_ONLY = re.compile(r'^[\d\s.,₹\-/]{1,100}$')
LETTER = re.compile(r'[A-Za-z]')
ALL_ZEROS = re.compile(r'^[0\-]{1,40}$')
OPEN_ENDED_BRACE = re.compile(r'\{\d{0,9},\}')


@dataclass(frozen=True)
class Candidate:
    """Validated match of one cascade rule."""
    value: str
    rule: str
    priority: int
    source: str  # "subject" | "content"


@dataclass(frozen=True)
class AmountCandidate:
    amount: float
    rule: str
    priority: int
    source: str


def rank_rules(rules: Iterable) -> list:
    """Rules by descending priority; table order breaks ties."""
    return sorted(rules, key=lambda r: -r.priority)


def iter_rule_values(rule, subject: str, content: str) -> Iterator[Tuple[str, str]]:
    """
    Yield (source, captured value) for every match of a rule.

    The subject is searched before the content; each source contributes at
    most MAX_MATCHES_PER_RULE matches.
    """
    sources = []
    if rule.in_subject and subject:
        sources.append(('subject', subject))
    if rule.in_content and content:
        sources.append(('content', content))

    for source, text in sources:
        for count, match in enumerate(rule.regex.finditer(text)):
            if count >= MAX_MATCHES_PER_RULE:
                break
            value = rule.capture(match)
            if value:
                yield source, value


def first_match(
    rules: Iterable,
    subject: str,
    content: str,
    validator: Callable[[str], bool],
) -> Optional[Candidate]:
    """
    Evaluate a field cascade.

    Rules are tried in priority order; the first captured value that passes
    the validator wins.
    """
    for rule in rank_rules(rules):
        for source, value in iter_rule_values(rule, subject, content):
            if validator(value):
                return Candidate(value=value, rule=rule.name, priority=rule.priority, source=source)
    return None


def collect_amounts(
    rules: Iterable,
    subject: str,
    content: str,
    floor: float,
    ceiling: float,
) -> List[AmountCandidate]:
    """Every plausible amount captured by any amount rule."""
    candidates = []
    for rule in rank_rules(rules):
        for source, value in iter_rule_values(rule, subject, content):
            amount = parse_amount(value)
            if is_plausible_amount(amount, floor, ceiling):
                candidates.append(
                    AmountCandidate(amount=amount, rule=rule.name, priority=rule.priority, source=source)
                )
    return candidates


def vote_amount(candidates: Iterable[AmountCandidate]) -> Optional[AmountCandidate]:
    """
    Priority + magnitude voting.

    The candidate with the highest rule priority wins; among equal
    priorities the larger amount wins. Position in the email never matters.
    """
    best = None
    for candidate in candidates:
        if best is None or (candidate.priority, candidate.amount) > (best.priority, best.amount):
            best = candidate
    return best


def is_plausible_amount(amount: Optional[float], floor: float, ceiling: float) -> bool:
    if amount is None or amount <= 0:
        return False
    return floor <= amount <= ceiling


def has_leakage_token(value: str) -> bool:
    for run in LETTER_RUN.findall(value.lower()):
        if run in LEAKAGE_TOKENS:
            return True
        if any(len(token) >= 4 and token in run for token in LEAKAGE_TOKENS):
            return True
    return False


def validate_identifier(value: str, shape) -> bool:
    """
    Check a captured order / tracking id against an IdentifierShape.

    Rejects HTML/CSS leakage, all-zero values and values outside the
    platform's length bounds or allowed shape.
    """
    if not value:
        return False
    if not shape.min_length <= len(value) <= shape.max_length:
        return False
    if shape.require_digit and not any(ch.isdigit() for ch in value):
        return False
    if ALL_ZEROS.match(value):
        return False

    if has_leakage_token(value):
        return False

    if shape.allowed and not re.fullmatch(shape.allowed, value):
        return False
    for pattern in shape.exclude:
        if re.fullmatch(pattern, value):
            return False
    return True


def validate_item_name(name: str, reject_terms: Iterable[str] = (), platform_name: Optional[str] = None) -> bool:
    """
    Check that a captured item name looks like a product.

    Args:
        name: Cleaned item name
        reject_terms: Whole words that mark totals, fees and boilerplate
        platform_name: Display name of the platform (never a product)

    Returns:
        True if the name is usable as a line item
    """
    if not name or not 3 <= len(name) <= 100:
        return False
    if len(LETTER.findall(name)) < 2:
        return False
    if NUMERIC_ONLY.match(name) or HEX_TOKEN.match(name):
        return False
    if CSS_LEAKAGE.search(name):
        return False

    lowered = name.lower()
    terms = list(reject_terms)
    if platform_name:
        terms.append(platform_name.lower())
    for term in terms:
        if re.search(rf'\b{re.escape(term)}\b', lowered):
            return False
    return True


class ItemCollector:
    """
    Ordered item set keyed by normalized name.

    A second item with the same key is dropped, not merged; nothing is
    added once max_items is reached.
    """

    def __init__(self, max_items: int):
        self.max_items = max_items
        self.items: List[LineItem] = []
        self._keys = set()

    def add(self, item: LineItem) -> bool:
        key = normalize_item_name(item.name)
        if not key or key in self._keys or self.full:
            return False
        self._keys.add(key)
        self.items.append(item)
        return True

    @property
    def full(self) -> bool:
        return len(self.items) >= self.max_items

    def __len__(self):
        return len(self.items)


def dedupe_items(items: Iterable[LineItem], max_items: int = 100) -> List[LineItem]:
    collector = ItemCollector(max_items)
    for item in items:
        collector.add(item)
    return collector.items


def has_unbounded_quantifier(pattern: str) -> bool:
    """
    True if a regex source uses `*`, `+` or `{n,}` outside a character class.

    Escaped characters and class members are skipped; a `]` directly after
    `[` or `[^` is a literal.
    """
    i = 0
    in_class = False
    class_start = -1
    length = len(pattern)

    while i < length:
        ch = pattern[i]
        if ch == '\\':
            i += 2
            continue
        if in_class:
            if ch == ']' and i != class_start:
                in_class = False
            i += 1
            continue
        if ch == '[':
            in_class = True
            class_start = i + 1
            if class_start < length and pattern[class_start] == '^':
                class_start += 1
            i += 1
            continue
        if ch in '*+':
            return True
        if ch == '{' and OPEN_ENDED_BRACE.match(pattern, i):
            return True
        i += 1

    return False
