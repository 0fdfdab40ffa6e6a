"""Pattern tables and line-level matching for PDF form analysis.

Every table here is built once at import time and never mutated. The order of
``FIELD_PATTERNS`` decides classification precedence: the first field type with
a matching pattern wins, so ``date`` is tried before ``number`` and ``yes_no``
before ``checkbox``.
"""

import re
from types import MappingProxyType
from typing import List, Mapping, Sequence, Tuple

from loguru import logger

from .models import FieldOption, FieldType, FieldTypeMatch, Frequency


def _compile(*patterns: str, flags: int = re.IGNORECASE) -> Tuple[re.Pattern, ...]:
    return tuple(re.compile(pattern, flags) for pattern in patterns)


FIELD_PATTERNS: Mapping[FieldType, Tuple[re.Pattern, ...]] = MappingProxyType({
    FieldType.DATE: _compile(
        r"\b(date|dated?)\s*[:.]?\s*[_\-/\s]*$",
        r"\b(mm/dd/yyyy|dd/mm/yyyy|yyyy-mm-dd)",
        r"\bdate\s+of\s+\w+",
    ),
    FieldType.TIME: _compile(
        r"\b(time|hour|am/pm)\s*[:.]?\s*[_\-\s]*$",
        r"\b(start|end|arrival|departure)\s+time",
    ),
    FieldType.SIGNATURE: _compile(
        r"\b(signature|signed|sign\s+here)\s*[:.]?\s*[_\-\s]*$",
        r"\b(employee|worker|supervisor|manager)\s+signature",
        r"\bauthoriz(ed|ation)\s+signature",
    ),
    FieldType.YES_NO: _compile(
        r"\[\s*\]\s*yes\s+\[\s*\]\s*no",
        r"\byes\s*/\s*no",
        r"\(\s*\)\s*yes\s+\(\s*\)\s*no",
    ),
    FieldType.YES_NO_NA: _compile(
        r"\[\s*\]\s*yes\s+\[\s*\]\s*no\s+\[\s*\]\s*(n/a|na)",
        r"\byes\s*/\s*no\s*/\s*(n/a|na)",
    ),
    FieldType.CHECKBOX: (
        re.compile(r"\[\s*\]|\(\s*\)|☐|□"),
        re.compile(r"\bcheck\s+(all|if|one)", re.IGNORECASE),
    ),
    FieldType.NUMBER: _compile(
        r"\b(number|count|qty|quantity|amount|total)\s*[:.]?\s*[_\-\s]*$",
        r"\b(#|no\.?)\s*[:.]?\s*[_\-\s]*$",
        r"\b(temperature|temp|weight|height|distance|measurement)",
    ),
    FieldType.PHONE: (
        re.compile(r"\b(phone|tel|telephone|mobile|cell)\s*(number|#|no\.?)\s*[:.]?\s*[_\-\s]*$", re.IGNORECASE),
        re.compile(r"\b(phone|tel|telephone|mobile|cell)\s*[:.]?\s*[_\-\s]*$", re.IGNORECASE),
        re.compile(r"\(\d{3}\)\s*\d{3}-\d{4}"),
    ),
    FieldType.EMAIL: _compile(
        r"\b(email|e-mail)\s*(address)?\s*[:.]?\s*[_\-\s]*$",
    ),
    FieldType.DROPDOWN: _compile(
        r"\bselect\s+(one|an?\s+option)",
        r"\bchoose\s+(one|from)",
    ),
    FieldType.TEXTAREA: _compile(
        r"\b(describe|description|explain|details|comments|notes|remarks)\s*[:.]?\s*[_\-\s]*$",
        r"\bprovide\s+(details|explanation)",
        r"_+\s*\n\s*_+",  # stacked underscore lines
    ),
    FieldType.PHOTO: _compile(
        r"\b(photo|picture|image|photograph)\s*(attach|upload|take)?",
        r"\battach\s+(photo|picture|image)",
    ),
    FieldType.GPS: _compile(
        r"\b(location|gps|coordinates|address|site\s+location)",
        r"\bwhere\s+did\s+(this|the)",
    ),
    FieldType.WORKER_SELECT: _compile(
        r"\b(employee|worker|staff|personnel)\s+(name|id)",
        r"\b(witness|injured\s+person|supervisor)\s+name",
    ),
    FieldType.EQUIPMENT_SELECT: _compile(
        r"\b(equipment|machine|tool|vehicle)\s+(id|name|number)",
        r"\basset\s+(id|number)",
    ),
    FieldType.RATING: _compile(
        r"\brat(e|ing)\s*[:.]?\s*(1-5|1-10)?",
        r"\b(score|level)\s*[:.]?\s*[_\-\s]*$",
    ),
})

# Header shapes: "1. General", "GENERAL INFORMATION", "IV. Signatures"
SECTION_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"^(\d+)\.\s+[A-Z]"),
    re.compile(r"^([A-Z][A-Z\s]+[A-Z])$"),
    re.compile(r"^[IVXLC]+\.\s+"),
)

SECTION_PREFIXES: Tuple[str, ...] = ("section", "part", "step")

# "Label: ____", "Label ____", "Label:", "1. Label:" (first match wins)
FIELD_LABEL_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"^(.+?)[:]\s*[_\-\s]*$"),
    re.compile(r"^(.+?)\s+[_]{3,}\s*$"),
    re.compile(r"^(.+?):\s*$"),
    re.compile(r"^(\d+\.\s*.+?)[:]\s*$"),
)

TITLE_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"^[A-Z][A-Z\s]+[A-Z]$"),
    re.compile(r"\bFORM\b", re.IGNORECASE),
    re.compile(r"\bCHECKLIST\b", re.IGNORECASE),
    re.compile(r"\bREPORT\b", re.IGNORECASE),
    re.compile(r"\bINSPECTION\b", re.IGNORECASE),
)

REQUIRED_PATTERN = re.compile(r"\*|required|\(required\)", re.IGNORECASE)

DESCRIPTION_START_PATTERN = re.compile(r"^(purpose|description|instructions|this form)", re.IGNORECASE)

OPTION_STARTERS = frozenset("[(□☐•-*")
OPTION_CLOSERS = frozenset("])")
CHECK_MARKERS = frozenset("xX✓✔")

# Explicit cadence words first, then defaults inferred from the form type
FREQUENCY_PATTERNS: Tuple[Tuple[re.Pattern, Frequency], ...] = (
    (re.compile(r"daily|each day|every day|per day|shift", re.IGNORECASE), Frequency.DAILY),
    (re.compile(r"weekly|each week|every week", re.IGNORECASE), Frequency.WEEKLY),
    (re.compile(r"monthly|each month|every month", re.IGNORECASE), Frequency.MONTHLY),
    (re.compile(r"quarterly|every quarter|every 3 months", re.IGNORECASE), Frequency.QUARTERLY),
    (re.compile(r"annual|yearly|each year|every year", re.IGNORECASE), Frequency.ANNUAL),
    (re.compile(r"inspection|checklist", re.IGNORECASE), Frequency.WEEKLY),
    (re.compile(r"incident|accident|injury", re.IGNORECASE), Frequency.AS_NEEDED),
    (re.compile(r"review|audit", re.IGNORECASE), Frequency.MONTHLY),
)

LABEL_CONFIDENCE = 85
CONTEXT_CONFIDENCE = 65
DEFAULT_CONFIDENCE = 50
MAX_RADIO_OPTIONS = 5
MAX_OPTION_LENGTH = 100


def is_section_header(line: str) -> bool:
    """Check whether a line looks like a section header."""
    trimmed = line.strip()
    if len(trimmed) < 3 or len(trimmed) > 100:
        return False

    lower = trimmed.lower()
    if lower.startswith(SECTION_PREFIXES):
        return True

    return any(pattern.search(trimmed) for pattern in SECTION_PATTERNS)


_SECTION_NUMBER = re.compile(r"^(?:\d+|[ivxlc]+)(?=[\s:.\-]|$)\s*", re.IGNORECASE)
_SECTION_SEPARATOR = re.compile(r"^[:.\-]+\s*")


def strip_section_prefix(line: str) -> str:
    """Turn "Section 2: Hazards" into "Hazards".

    Lines that do not start with section/part/step are returned trimmed. When
    nothing is left after stripping, the trimmed line is returned instead.
    """
    trimmed = line.strip()
    lower = trimmed.lower()
    for prefix in SECTION_PREFIXES:
        if lower.startswith(prefix):
            rest = trimmed[len(prefix):].lstrip()
            rest = _SECTION_NUMBER.sub("", rest, count=1)
            rest = _SECTION_SEPARATOR.sub("", rest, count=1)
            return rest.strip() or trimmed
    return trimmed


def extract_options(lines: Sequence[str]) -> List[FieldOption]:
    """Collect options written as bullet or checkbox lines.

    Args:
        lines: Context lines following (and including) a label line

    Returns:
        Options in the order they appear
    """
    options: List[FieldOption] = []

    for line in lines:
        trimmed = line.strip()
        if not trimmed or trimmed[0] not in OPTION_STARTERS:
            continue

        rest = trimmed[1:].lstrip()
        if rest[:1] in OPTION_CLOSERS:
            rest = rest[1:].lstrip()
        if rest[:1] in CHECK_MARKERS:
            rest = rest[1:].lstrip()

        label = rest.strip()
        if label and len(label) < MAX_OPTION_LENGTH:
            options.append(FieldOption.from_label(label))

    return options


def detect_field_type(label: str, context_lines: Sequence[str] = ()) -> FieldTypeMatch:
    """Classify a label into a field type.

    Field types are tried in ``FIELD_PATTERNS`` order and the first pattern that
    matches either the label or the joined context decides the type. A label
    hit scores 85, a context-only hit 65, no hit at all falls back to text/50.
    Dropdown and checkbox hits become radio (up to five options) or dropdown
    when options can be harvested from the context.

    Args:
        label: Field label text
        context_lines: The label line and up to four lines after it

    Returns:
        Detected type, confidence and any harvested options
    """
    normalized_label = label.lower().strip()
    context = " ".join(context_lines).lower()

    for field_type, patterns in FIELD_PATTERNS.items():
        for pattern in patterns:
            label_hit = pattern.search(normalized_label) is not None
            if not label_hit and pattern.search(context) is None:
                continue

            confidence = LABEL_CONFIDENCE if label_hit else CONTEXT_CONFIDENCE

            if field_type in (FieldType.DROPDOWN, FieldType.CHECKBOX):
                options = extract_options(context_lines)
                if options:
                    resolved = FieldType.DROPDOWN if len(options) > MAX_RADIO_OPTIONS else FieldType.RADIO
                    logger.debug(f"'{label}' resolved to {resolved.value} with {len(options)} options")
                    return FieldTypeMatch(type=resolved, confidence=confidence, options=options)

            return FieldTypeMatch(type=field_type, confidence=confidence)

    return FieldTypeMatch(type=FieldType.TEXT, confidence=DEFAULT_CONFIDENCE)
