"""
Order Parsing Utilities

Pure helpers shared by every platform rule table.
Includes:
- HTML to text conversion (link/alt text preserved, block structure kept as lines)
- Currency symbol normalization
- Amount/date parsing and formatting
- Item name normalization
"""

import html
import re
from datetime import date
from typing import Optional

from bs4 import BeautifulSoup


RUPEE = '₹'

# Entity / textual spellings of the rupee that survive HTML decoding or
# appear in plain-text bodies. Order matters: entities before words.
CURRENCY_SYMBOL_PATTERNS = [
    (re.compile(r'&#8377;|&#x20b9;|&#X20B9;|&rupee;|&rupees;|&inr;', re.IGNORECASE), RUPEE),
    (re.compile(r'₨'), RUPEE),  # legacy rupee sign
    (re.compile(r'\bRs\.?\s{0,2}(?=\d)', re.IGNORECASE), RUPEE),
    (re.compile(r'\bINR\s{0,2}(?=\d)'), RUPEE),
]

BLOCK_TAGS = [
    'p', 'div', 'br', 'tr', 'li', 'table', 'tbody', 'thead', 'tfoot',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'section', 'article', 'header',
    'footer', 'ul', 'ol', 'hr', 'center', 'blockquote',
]

HTML_MARKER = re.compile(r'<\s{0,3}[a-zA-Z!/][^>]{0,2000}>')

MONTH_PATTERN = (
    r'(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?'
    r'|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)'
)

# Date patterns, tried in order
DATE_PATTERNS = [
    # 15 January 2024, 15-Jan-2024, 15th Jan, 2024
    (re.compile(rf'\b(\d{{1,2}})(?:st|nd|rd|th)?[\s\-]{{1,3}}({MONTH_PATTERN})\.?,?[\s\-]{{1,3}}(\d{{4}})\b', re.IGNORECASE), 'DMY_FULL'),
    # January 15, 2024
    (re.compile(rf'\b({MONTH_PATTERN})\.?\s{{1,3}}(\d{{1,2}})(?:st|nd|rd|th)?,?\s{{1,3}}(\d{{4}})\b', re.IGNORECASE), 'MDY_FULL'),
    # 2024-01-15
    (re.compile(r'\b(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})\b'), 'YMD'),
    # 15/01/2024 or 15-01-2024 (Indian senders use day-first)
    (re.compile(r'\b(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})\b'), 'DMY'),
]

MONTH_MAP = {
    'jan': 1, 'january': 1,
    'feb': 2, 'february': 2,
    'mar': 3, 'march': 3,
    'apr': 4, 'april': 4,
    'may': 5,
    'jun': 6, 'june': 6,
    'jul': 7, 'july': 7,
    'aug': 8, 'august': 8,
    'sep': 9, 'sept': 9, 'september': 9,
    'oct': 10, 'october': 10,
    'nov': 11, 'november': 11,
    'dec': 12, 'december': 12,
}

MIN_YEAR = 2000
MAX_YEAR = 2100


def clean_html(raw: str) -> str:
    """
    Convert HTML to plain text, one block element per line.

    Scripts and styles are dropped, images are replaced with their alt
    text, and link text is kept inline.

    Args:
        raw: HTML content

    Returns:
        Plain text content
    """
    if not raw:
        return ''

    soup = BeautifulSoup(raw, 'html.parser')

    for element in soup(['script', 'style', 'head', 'meta', 'noscript', 'title']):
        element.decompose()

    for img in soup.find_all('img'):
        alt = (img.get('alt') or '').strip()
        img.replace_with(f' {alt} ' if alt else ' ')

    for tag in soup.find_all(BLOCK_TAGS):
        tag.insert_before('\n')
        tag.insert_after('\n')

    text = soup.get_text(separator=' ')
    return _collapse_lines(text)


def extract_text_content(raw: str) -> str:
    """
    Plain text for a body that may or may not contain markup.

    Args:
        raw: Text or HTML body

    Returns:
        Text with entities decoded and whitespace collapsed per line
    """
    if not raw:
        return ''
    if HTML_MARKER.search(raw):
        return clean_html(raw)
    return _collapse_lines(html.unescape(raw))


def _collapse_lines(text: str) -> str:
    text = text.replace('\r\n', '\n').replace('\r', '\n').replace('\xa0', ' ')
    lines = []
    for line in text.split('\n'):
        line = re.sub(r'[ \t\f\v\u200b\u200c]+', ' ', line).strip()
        if line:
            lines.append(line)
    return '\n'.join(lines)


def normalize_currency_symbols(text: str) -> str:
    """Rewrite entity-encoded and textual rupee spellings as the rupee sign."""
    if not text:
        return ''
    for pattern, replacement in CURRENCY_SYMBOL_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def prepare_content(html_body: str, text_body: str, max_chars: int) -> str:
    """
    Build the searchable body for an email.

    HTML body first, then the text body, currency-normalized and truncated
    to max_chars.
    """
    parts = []
    html_text = clean_html(html_body)
    if html_text:
        parts.append(html_text)
    plain = extract_text_content(text_body)
    if plain and plain not in parts:
        parts.append(plain)
    content = normalize_currency_symbols('\n'.join(parts))
    return content[:max_chars]


def parse_amount(text: str) -> Optional[float]:
    """Extract numeric amount from text like '₹1,299.00', 'Rs. 452' or '999'."""
    if not text:
        return None

    cleaned = re.sub(r'[₹\s]', '', normalize_currency_symbols(str(text)))
    cleaned = cleaned.replace(',', '')

    match = re.search(r'\d{1,12}(?:\.\d{1,2})?', cleaned)
    if match:
        try:
            return float(match.group(0))
        except ValueError:
            pass
    return None


def format_amount(amount: Optional[float], symbol: str = RUPEE) -> Optional[str]:
    """Format an amount as '₹452.00'."""
    if amount is None:
        return None
    return f"{symbol}{amount:.2f}"


def parse_date_text(text: str) -> Optional[date]:
    """Parse the first recognizable date in text."""
    if not text:
        return None

    for pattern, fmt in DATE_PATTERNS:
        for match in pattern.finditer(text):
            try:
                if fmt == 'DMY_FULL':
                    day = int(match.group(1))
                    month = MONTH_MAP[match.group(2).lower().rstrip('.')]
                    year = int(match.group(3))
                elif fmt == 'MDY_FULL':
                    month = MONTH_MAP[match.group(1).lower().rstrip('.')]
                    day = int(match.group(2))
                    year = int(match.group(3))
                elif fmt == 'YMD':
                    year = int(match.group(1))
                    month = int(match.group(2))
                    day = int(match.group(3))
                else:
                    day = int(match.group(1))
                    month = int(match.group(2))
                    year = int(match.group(3))

                if not MIN_YEAR <= year <= MAX_YEAR:
                    continue
                return date(year, month, day)
            except (ValueError, KeyError):
                continue

    return None


def normalize_item_name(name: str) -> str:
    """Dedup key for an item name: trimmed, lowercased, whitespace collapsed."""
    if not name:
        return ''
    return re.sub(r'\s+', ' ', name).strip().lower()


def clean_product_name(name: str, max_length: int = 100) -> str:
    """
    Tidy a captured product name.

    Removes bullets, leading quantity markers and trailing separators.
    """
    if not name:
        return ''
    cleaned = re.sub(r'\s+', ' ', name).strip()
    cleaned = re.sub(r'^[\-\*•·|:>]{1,3}\s{0,3}', '', cleaned)
    cleaned = re.sub(r'^(?:qty\s{0,2}:?\s{0,2})?\d{1,3}\s{0,2}[x×]\s{1,3}', '', cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r'[\s\-–:|,@]{1,5}$', '', cleaned)
    cleaned = cleaned.strip(' "\'')
    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length].rstrip()
    return cleaned
