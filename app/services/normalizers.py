"""
Value normalizers for coach workbook cells.

Every function here is total: blank, malformed or missing input maps to
None (or an empty list) instead of raising.
"""
import re
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence, Union

KeywordTable = Sequence[tuple[str, Sequence[str]]]

CURRENCY_PREFIX = re.compile(r"^(US\$|\$|€|£)", re.IGNORECASE)
INTEGER_PREFIX = re.compile(r"^\s*([+-]?\d+)")
FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")

# Ordered: the first matching group is a coach's primary specialty.
EVENT_GROUP_KEYWORDS: KeywordTable = (
    ("sprints", ("sprint", "100", "200", "400")),
    (
        "distance",
        ("distance", "800", "1500", "mile", "3000", "5000", "10000", "xc", "cross country"),
    ),
    ("throws", ("throw", "shot", "discus", "javelin", "hammer")),
    ("jumps", ("jump", "long jump", "triple", "high jump", "pole vault")),
    ("hurdles", ("hurdle", "110h", "400h", "100h")),
    ("relays", ("relay", "4x1", "4x4")),
    (
        "combined",
        ("multi", "heptathlon", "decathlon", "pentathlon", "combined", "all events"),
    ),
)

SPECIFIC_EVENT_KEYWORDS: KeywordTable = (
    ("100m", ("100m", "100 m")),
    ("200m", ("200m", "200 m")),
    ("400m", ("400m", "400 m")),
    ("800m", ("800m", "800 m")),
    ("1500m", ("1500m", "1500 m", "mile")),
    ("3000m Steeplechase", ("3000m", "3000 m", "steeplechase")),
    ("5000m", ("5000m", "5000 m", "5k")),
    ("10000m", ("10000m", "10000 m", "10k")),
    ("110m Hurdles", ("110h", "110m hurdles")),
    ("100m Hurdles", ("100h", "100m hurdles")),
    ("400m Hurdles", ("400h", "400m hurdles")),
    ("Long Jump", ("long jump",)),
    ("Triple Jump", ("triple jump",)),
    ("High Jump", ("high jump",)),
    ("Pole Vault", ("pole vault",)),
    ("Shot Put", ("shot put", "shot")),
    ("Discus", ("discus",)),
    ("Javelin", ("javelin",)),
    ("Hammer Throw", ("hammer",)),
    ("Decathlon", ("decathlon",)),
    ("Heptathlon", ("heptathlon",)),
    ("Pentathlon", ("pentathlon",)),
    ("4x100m Relay", ("4x100", "4x1")),
    ("4x400m Relay", ("4x400", "4x4")),
)

# Which reference event names plausibly belong to an event group.
EVENT_NAME_GROUP_KEYWORDS: KeywordTable = (
    ("sprints", ("100m", "200m", "400m")),
    ("distance", ("800", "1500", "3000", "5000", "10000")),
    ("throws", ("shot", "discus", "javelin", "hammer")),
    ("jumps", ("jump", "vault")),
    ("hurdles", ("hurdle",)),
    ("relays", ("relay",)),
    ("combined", ("athlon",)),
)

# "women" contains "men", so it has to be tested first.
GENDER_KEYWORDS: KeywordTable = (
    ("women", ("women", "woman")),
    ("men", ("men", "man")),
)

DIVISION_CODES = {
    "DI": "DI",
    "DII": "DII",
    "DIII": "DIII",
    "JuCo": "JuCo",
    "NAIA": "NAIA",
    "D1": "DI",
    "D2": "DII",
    "D3": "DIII",
    "NJCAA": "JuCo",
}

DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%Y/%m/%d", "%d-%b-%Y", "%b %d, %Y", "%B %d, %Y")


def match_keywords(text: Optional[str], table: KeywordTable) -> list[str]:
    """
    Return every label in ``table`` whose keywords appear in ``text``.

    Matching is case-insensitive substring containment; labels come back in
    table order, so the table itself decides ties.
    """
    if not text:
        return []
    lowered = text.lower()
    return [label for label, keywords in table if any(k in lowered for k in keywords)]


def first_keyword_match(
    text: Optional[str], table: KeywordTable, default: Optional[str] = None
) -> Optional[str]:
    matches = match_keywords(text, table)
    return matches[0] if matches else default


def nullify_empty_string(value: Optional[str]) -> Optional[str]:
    """Blank, "-" or missing -> None; anything else passes through."""
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    if value == "-" or value.strip() == "":
        return None
    return value


def remove_null_values(values: dict[str, Any]) -> dict[str, Any]:
    """Drop None entries so an update never overwrites data with nulls."""
    return {key: value for key, value in values.items() if value is not None}


def _int_prefix(value: str) -> Optional[int]:
    match = INTEGER_PREFIX.match(value)
    return int(match.group(1)) if match else None


def _float_prefix(value: str) -> Optional[float]:
    match = FLOAT_PREFIX.match(value)
    return float(match.group(1)) if match else None


def percentage_to_decimal(value: Union[str, float, int, None]) -> Optional[float]:
    """
    "45%" -> 0.45, "0.45" -> 0.45.

    Numbers at or below 1 are taken to be fractions already.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    else:
        if nullify_empty_string(value) is None:
            return None
        number = _float_prefix(value.replace("%", "").strip())
        if number is None:
            return None
    if number <= 1:
        return number
    return number / 100


def percentile_range(value: Optional[str]) -> dict[str, Optional[int]]:
    """Split "600-700" into {"min": 600, "max": 700}; each half may be None."""
    if nullify_empty_string(value) is None:
        return {"min": None, "max": None}

    parts = [part.strip() for part in value.split("-")]
    if len(parts) != 2:
        return {"min": None, "max": None}

    return {"min": _int_prefix(parts[0]), "max": _int_prefix(parts[1])}


def currency_to_integer(value: Optional[str]) -> Optional[int]:
    """
    Parse an integer amount from US ("$32,564") or European ("US$32.564")
    formatted text.
    """
    if nullify_empty_string(value) is None:
        return None

    cleaned = CURRENCY_PREFIX.sub("", value.strip()).strip()

    # A period with no comma and a 3-digit tail is a thousands separator.
    if "." in cleaned and "," not in cleaned:
        parts = cleaned.split(".")
        if len(parts[-1]) == 3 and len(parts) <= 3:
            cleaned = cleaned.replace(".", "")

    cleaned = cleaned.replace(",", "")
    return _int_prefix(cleaned)


def parse_float(value: Optional[str]) -> Optional[float]:
    if nullify_empty_string(value) is None:
        return None
    return _float_prefix(value.replace(",", "").strip())


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a hire date cell; unrecognised text yields None."""
    cleaned = nullify_empty_string(value)
    if cleaned is None:
        return None
    cleaned = cleaned.strip()

    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        parsed = None
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(cleaned, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def event_groups_from_text(text: Optional[str]) -> list[str]:
    return match_keywords(text, EVENT_GROUP_KEYWORDS)


def primary_specialty_from_text(text: Optional[str]) -> Optional[str]:
    return first_keyword_match(text, EVENT_GROUP_KEYWORDS)


def specific_event_names_from_text(text: Optional[str]) -> list[str]:
    return match_keywords(text, SPECIFIC_EVENT_KEYWORDS)


def event_name_matches_group(event_name: str, event_group: str) -> bool:
    return event_group in match_keywords(event_name, EVENT_NAME_GROUP_KEYWORDS)


def infer_gender(sport_code: Optional[str]) -> str:
    """Program gender from the sport code; men when nothing matches."""
    return first_keyword_match(sport_code, GENDER_KEYWORDS, default="men")


def infer_program_scope(sport_code: Optional[str], position: Optional[str]) -> str:
    """
    Which program(s) a job covers.

    Directors, and head coaches on rows without a sport code, cover both
    programs; otherwise the sport code decides.
    """
    position_text = (position or "").lower()
    if "director" in position_text or ("head coach" in position_text and not sport_code):
        return "both"
    return infer_gender(sport_code)


def map_division_code(sheet_name: Optional[str]) -> Optional[str]:
    """Canonical division name for a sheet name or abbreviation."""
    if sheet_name is None:
        return None
    name = sheet_name.strip()
    if name in DIVISION_CODES:
        return DIVISION_CODES[name]
    for code, canonical in DIVISION_CODES.items():
        if code.lower() == name.lower():
            return canonical
    return name


def cell_to_string(value: Any) -> Optional[str]:
    """Coerce a workbook cell to text without inferring types."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if (value.hour, value.minute, value.second, value.microsecond) == (0, 0, 0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value)
    return text if text != "" else None
