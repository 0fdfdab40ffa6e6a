"""Form structure extraction from PDF text.

Turns the flat text of a paper safety form into a title, an ordered list of
sections and typed field candidates that can be reviewed and published as a
digital form.
"""

import math
import re
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Set, Tuple

from loguru import logger

from .models import (
    AIAnalysisResult,
    AnalysisResult,
    DetectedField,
    DetectedSection,
    FieldType,
    Frequency,
    ValidationRules,
)
from .patterns import (
    DESCRIPTION_START_PATTERN,
    FIELD_LABEL_PATTERNS,
    FREQUENCY_PATTERNS,
    REQUIRED_PATTERN,
    TITLE_PATTERNS,
    detect_field_type,
    is_section_header,
    strip_section_prefix,
)


DEFAULT_SECTION_TITLE = "Form Fields"
TITLE_SCAN_LINES = 10
DESCRIPTION_SCAN_LINES = 20
CONTEXT_WINDOW = 5
FIELD_CODE_LENGTH = 30

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
PHONE_PATTERN = r"^[+]?[(]?[0-9]{3}[)]?[-\s.]?[0-9]{3}[-\s.]?[0-9]{4,6}$"

# Keyword table for the single best element guess made during analysis.
# Multi-word keywords are more specific, so each hit scores its word count.
ELEMENT_SUGGESTION_KEYWORDS: Mapping[int, Tuple[str, ...]] = MappingProxyType({
    1: ("policy", "commitment", "management commitment"),
    2: ("hazard assessment", "hazard identification", "risk assessment", "jha", "job hazard"),
    3: ("hazard control", "control measures", "ppe", "protective equipment", "safe work"),
    4: ("inspection", "site inspection", "workplace inspection", "audit"),
    5: ("qualification", "training", "competency", "orientation", "certification"),
    6: ("emergency", "evacuation", "fire drill", "first aid", "emergency response"),
    7: ("incident", "accident", "injury", "near miss", "investigation"),
    8: ("communication", "toolbox talk", "safety meeting", "briefing"),
    9: ("review", "management review", "statistics", "performance"),
    10: ("incident investigation", "root cause", "corrective action"),
    11: ("emergency preparedness", "emergency plan", "drill record"),
    12: ("statistics", "records", "injury log", "first aid log"),
    13: ("legislation", "compliance", "regulatory", "legal"),
    14: ("management", "program administration", "system review"),
})
MIN_ELEMENT_SUGGESTION_SCORE = 2

_WHITESPACE = re.compile(r"\s+")
_NON_CODE_CHARS = re.compile(r"[^a-z0-9\s]")
_FILE_EXTENSION = re.compile(r"\.[^.]+$")
_FILE_SEPARATORS = re.compile(r"[_-]")
_WORD_START = re.compile(r"\b\w")


def round_half_up(value: float) -> int:
    """Round .5 upwards, unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def split_lines(text: str) -> List[str]:
    """Split text into trimmed, non-empty lines."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def generate_field_code(label: str, index: int) -> str:
    """Derive a snake_case field code from a label."""
    code = _NON_CODE_CHARS.sub("", label.lower()).strip()
    code = _WHITESPACE.sub("_", code)[:FIELD_CODE_LENGTH]
    return code or f"field_{index}"


def generate_validation(field_type: FieldType, label: str) -> ValidationRules:
    """Build validation rules for a field from its type and label."""
    rules = ValidationRules(required=False)

    if field_type == FieldType.EMAIL:
        rules.pattern = EMAIL_PATTERN
        rules.custom_message = "Please enter a valid email address"
    elif field_type == FieldType.PHONE:
        rules.pattern = PHONE_PATTERN
        rules.custom_message = "Please enter a valid phone number"
    elif field_type == FieldType.NUMBER:
        rules.min_value = 0
    elif field_type == FieldType.TEXTAREA:
        rules.max_length = 1000
    elif field_type == FieldType.TEXT:
        rules.max_length = 255

    if REQUIRED_PATTERN.search(label):
        rules.required = True

    return rules


def calculate_overall_confidence(fields: Sequence[DetectedField]) -> int:
    """Overall analysis confidence, floored at 30 and capped at 95."""
    if not fields:
        return 30

    average = sum(f.type_confidence for f in fields) / len(fields)
    field_count_bonus = min(len(fields) * 2, 20)
    return min(round_half_up(average + field_count_bonus), 95)


def suggest_cor_element(text: str, title: str) -> Optional[int]:
    """Guess the single COR element a form most likely belongs to."""
    lower_text = f"{text} {title}".lower()

    best_element: Optional[int] = None
    best_score = 0
    for element, keywords in ELEMENT_SUGGESTION_KEYWORDS.items():
        score = sum(len(keyword.split(" ")) for keyword in keywords if keyword in lower_text)
        if score > best_score:
            best_element, best_score = element, score

    return best_element if best_score >= MIN_ELEMENT_SUGGESTION_SCORE else None


def suggest_frequency(text: str, title: str) -> Frequency:
    """Guess how often a form is filled in."""
    lower_text = f"{text} {title}".lower()
    for pattern, frequency in FREQUENCY_PATTERNS:
        if pattern.search(lower_text):
            return frequency
    return Frequency.AS_NEEDED


def generate_description(text: str, title: str) -> str:
    """Pick a purpose statement from the top of the form, if there is one."""
    lines = split_lines(text)

    for i, line in enumerate(lines[:DESCRIPTION_SCAN_LINES]):
        if DESCRIPTION_START_PATTERN.search(line):
            return line
        if 50 < len(line) < 300 and ":" not in line and i > 0:
            return line

    return f"Digital version of {title}. Converted from PDF form."


class FormStructureExtractor:
    """Extracts sections and typed field candidates from form text."""

    def analyze(self, text: str, page_count: int, file_name: str) -> AnalysisResult:
        """Analyze extracted PDF text and detect the form structure.

        Args:
            text: Text extracted from the PDF (may be empty)
            page_count: Number of pages in the PDF
            file_name: Original file name, used as a title fallback

        Returns:
            Analysis summary and the detected fields
        """
        lines = split_lines(text)

        form_title = self.detect_form_title(lines, file_name)
        sections = self.detect_sections(lines)
        fields = self.detect_fields(lines, sections)

        analysis = AIAnalysisResult(
            form_title=form_title,
            form_description=generate_description(text, form_title),
            suggested_cor_element=suggest_cor_element(text, form_title),
            suggested_frequency=suggest_frequency(text, form_title),
            detected_sections=sections,
            processing_notes=(
                f"Extracted {len(lines)} lines from {page_count} pages. "
                f"Detected {len(fields)} potential fields."
            ),
            confidence_score=calculate_overall_confidence(fields),
        )

        logger.info(
            f"Analyzed '{file_name}': title='{form_title}', sections={len(sections)}, "
            f"fields={len(fields)}, confidence={analysis.confidence_score}"
        )

        return AnalysisResult(analysis=analysis, detected_fields=fields)

    def detect_form_title(self, lines: Sequence[str], file_name: str) -> str:
        """Find the form title in the first lines, or derive it from the file name."""
        for line in lines[:TITLE_SCAN_LINES]:
            if any(pattern.search(line) for pattern in TITLE_PATTERNS):
                return _WHITESPACE.sub(" ", line).strip()

        name = _FILE_EXTENSION.sub("", file_name)
        name = _FILE_SEPARATORS.sub(" ", name)
        return _WORD_START.sub(lambda m: m.group(0).upper(), name)

    def detect_sections(self, lines: Sequence[str]) -> List[DetectedSection]:
        """Detect section headers in document order.

        Falls back to a single "Form Fields" section when no header is found.
        """
        sections: List[DetectedSection] = []

        for line in lines:
            if is_section_header(line):
                order = len(sections)
                sections.append(DetectedSection(
                    id=f"section_{order}",
                    title=strip_section_prefix(line),
                    order=order,
                    field_ids=[],
                ))
                logger.debug(f"Detected section {order}: {sections[-1].title}")

        if not sections:
            sections.append(DetectedSection(
                id="section_0",
                title=DEFAULT_SECTION_TITLE,
                order=0,
                field_ids=[],
            ))

        return sections

    def detect_fields(self, lines: Sequence[str], sections: List[DetectedSection]) -> List[DetectedField]:
        """Detect field candidates and attach them to their sections.

        Args:
            lines: Trimmed, non-empty document lines
            sections: Sections from ``detect_sections``; their ``field_ids``
                are filled in as fields are found

        Returns:
            Detected fields in document order
        """
        fields: List[DetectedField] = []
        used_codes: Set[str] = set()
        current_section_index = 0
        field_order = 0

        for i, line in enumerate(lines):
            if is_section_header(line):
                section_index = self._find_section_index(strip_section_prefix(line), sections)
                if section_index is not None:
                    current_section_index = section_index
                    field_order = 0
                continue

            label = self._extract_label(line)
            if not label or len(label) < 2 or len(label) > 150:
                continue

            # Long questions are instructions rather than field labels
            if label.endswith("?") and len(label) > 80:
                continue

            context_lines = lines[i:i + CONTEXT_WINDOW]
            match = detect_field_type(label, context_lines)
            field_code = self._unique_field_code(label, len(fields), used_codes)

            section = sections[current_section_index] if current_section_index < len(sections) else None
            field = DetectedField(
                field_code=field_code,
                detected_label=label,
                suggested_type=match.type,
                type_confidence=match.confidence,
                page_number=1,
                suggested_options=match.options,
                suggested_validation=generate_validation(match.type, label),
                section_label=section.title if section else None,
                section_order=current_section_index,
                field_order=field_order,
            )

            if section is not None:
                section.field_ids.append(field_code)

            fields.append(field)
            field_order += 1
            logger.debug(f"Detected field '{label}' as {match.type.value} ({match.confidence})")

        return fields

    @staticmethod
    def _extract_label(line: str) -> Optional[str]:
        for pattern in FIELD_LABEL_PATTERNS:
            match = pattern.match(line)
            if match:
                return match.group(1).strip()
        return None

    @staticmethod
    def _find_section_index(title: str, sections: Sequence[DetectedSection]) -> Optional[int]:
        lower_title = title.lower()
        for index, section in enumerate(sections):
            section_title = section.title.lower()
            if lower_title in section_title or section_title in lower_title:
                return index
        return None

    @staticmethod
    def _unique_field_code(label: str, index: int, used_codes: Set[str]) -> str:
        code = generate_field_code(label, index)
        if code in used_codes:
            code = f"field_{index}"
            suffix = 1
            while code in used_codes:
                code = f"field_{index}_{suffix}"
                suffix += 1
        used_codes.add(code)
        return code


form_structure_extractor = FormStructureExtractor()


def analyze_pdf_content(text: str, page_count: int, file_name: str) -> AnalysisResult:
    """Analyze extracted PDF text with the shared extractor."""
    return form_structure_extractor.analyze(text, page_count, file_name)
