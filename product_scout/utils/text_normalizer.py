"""
Text normalization helpers for prices, titles and descriptions.

Retailers format amounts inconsistently ("1,234.56", "1234,56", "29,99€"),
prefix them with filler ("From", "Starting at") and mix them with other text.
Everything here is a pure function over strings.
"""
import re
from typing import Optional

from product_scout.models.product import PRICE_NOT_FOUND, PriceInfo

CURRENCY_SYMBOLS = "$€£¥₹₽₩¢"
DEFAULT_CURRENCY = "$"

_SYM = f"[{re.escape(CURRENCY_SYMBOLS)}]"
_AMOUNT = r"\d+(?:[.,]\d+)*"

FILLER_PREFIX_RE = re.compile(
    r"^\s*(?:from|starting\s+at|as\s+low\s+as|only|just|now)\b[:\s]*",
    re.IGNORECASE,
)
PRICE_TOKEN_RE = re.compile(rf"{_SYM}\s*{_AMOUNT}|{_AMOUNT}(?:\s*{_SYM})?")
PRICE_FORMAT_RE = re.compile(rf"{_SYM}\s*\d|\d(?:[.,]\d+)*\s*{_SYM}")
CURRENCY_AMOUNT_RE = re.compile(rf"{_SYM}\s*{_AMOUNT}|{_AMOUNT}\s*{_SYM}")
CURRENCY_RE = re.compile(_SYM)
NUMBER_TOKEN_RE = re.compile(r"\d[\d.,]*\d|\d")
FIRST_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")
WHITESPACE_RE = re.compile(r"\s+")

ISO_TO_SYMBOL = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "KRW": "₩",
    "RUB": "₽",
    "CNY": "¥",
    "CAD": "$",
    "AUD": "$",
}


def normalize_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    if not text:
        return ""
    return WHITESPACE_RE.sub(" ", text).strip()


def clean_price_text(raw: Optional[str]) -> str:
    """
    Reduce a price-bearing string to its first currency/amount token.

    Leading filler words are dropped first. When no numeric token exists the
    trimmed input is returned unchanged.
    """
    if not raw:
        return ""
    text = normalize_whitespace(str(raw))
    text = FILLER_PREFIX_RE.sub("", text).strip()
    match = PRICE_TOKEN_RE.search(text)
    return match.group(0).strip() if match else text


def is_price_format(text: Optional[str]) -> bool:
    """True if text holds a number with a currency glyph directly before or after it."""
    if not text:
        return False
    return PRICE_FORMAT_RE.search(text) is not None


def find_currency_amount(text: Optional[str]) -> Optional[str]:
    """Return the first currency-adjacent amount in free text, if any."""
    if not text:
        return None
    match = CURRENCY_AMOUNT_RE.search(text)
    return match.group(0).strip() if match else None


def parse_amount(text: Optional[str]) -> float:
    """
    Parse the numeric amount of a price string.

    With both separators present the comma is a thousands separator; with a
    single comma it is the decimal separator. Returns 0 on failure.
    """
    if text is None:
        return 0.0
    match = NUMBER_TOKEN_RE.search(str(text))
    if not match:
        return 0.0
    token = match.group(0)

    if "," in token and "." in token:
        token = token.replace(",", "")
    elif "," in token:
        token = token.replace(",", "") if token.count(",") > 1 else token.replace(",", ".")
    if token.count(".") > 1:
        token = token.replace(".", "")

    try:
        return float(token)
    except ValueError:
        return 0.0


def detect_currency(text: Optional[str]) -> str:
    """Return the first currency glyph in text, defaulting to '$'."""
    if not text:
        return DEFAULT_CURRENCY
    match = CURRENCY_RE.search(text)
    return match.group(0) if match else DEFAULT_CURRENCY


def iso_to_symbol(iso: Optional[str]) -> str:
    """Map an ISO-4217 code to its glyph; unknown codes map to '$'."""
    if not iso:
        return DEFAULT_CURRENCY
    code = str(iso).strip().upper()
    if len(code) == 1 and code in CURRENCY_SYMBOLS:
        return code
    return ISO_TO_SYMBOL.get(code, DEFAULT_CURRENCY)


def format_display(symbol: str, value: float) -> str:
    """Render an amount as '<symbol><value with two decimals>'."""
    if not value:
        return f"{symbol}0.00"
    return f"{symbol}{value:.2f}"


def first_number(text: Optional[str]) -> Optional[float]:
    """Return the first numeric token in text (thousands commas dropped)."""
    if not text:
        return None
    match = FIRST_NUMBER_RE.search(text)
    if not match:
        return None
    try:
        return float(match.group(0).replace(",", ""))
    except ValueError:
        return None


def price_info_from_text(display: Optional[str]) -> PriceInfo:
    """Build a PriceInfo from a cleaned display string; empty input is 'not found'."""
    if not display or display == PRICE_NOT_FOUND:
        return PriceInfo.not_found()
    return PriceInfo(
        value=parse_amount(display),
        display_value=display,
        currency=detect_currency(display),
    )
