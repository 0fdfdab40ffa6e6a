"""COR element mapping for converted forms.

Scores a form against the 14 COR elements using weighted keyword matches and
links each suggested element to the audit questions the form could serve as
evidence for.
"""

from typing import List, Optional, Sequence

from loguru import logger

from modules.form_converter.extractor import round_half_up
from modules.form_converter.models import AIAnalysisResult, DetectedField
from .elements import COR_ELEMENTS, get_cor_element
from .keywords import COR_ELEMENT_KEYWORDS
from .models import (
    AuditQuestion,
    AuditQuestionSuggestion,
    CORElement,
    CORElementSuggestion,
    ElementMatch,
    ElementSummary,
    QuestionCategory,
)


PRIMARY_KEYWORD_SCORE = 30
SECONDARY_KEYWORD_SCORE = 10
FORM_TYPE_SCORE = 25
ANALYSIS_AGREEMENT_SCORE = 20
MAX_CONFIDENCE = 95
MIN_SUGGESTION_CONFIDENCE = 20
MAX_SUGGESTIONS = 5
MAX_REASONS = 3

QUESTION_WORD_SCORE = 15
EVIDENCE_TYPE_SCORE = 20
DOCUMENTATION_BONUS = 10
MIN_QUESTION_RELEVANCE = 20
MAX_RELATED_QUESTIONS = 5

MATCH_THRESHOLD = 30


def suggest_cor_elements(
    analysis: AIAnalysisResult,
    fields: Sequence[DetectedField],
    full_text: str,
) -> List[CORElementSuggestion]:
    """Rank the COR elements a form most likely supports.

    Args:
        analysis: Analysis of the form (title and the extractor's own guess)
        fields: Detected fields; user-edited labels take precedence
        full_text: Full extracted text of the form

    Returns:
        Up to five suggestions, highest confidence first
    """
    lower_title = analysis.form_title.lower()
    field_labels = " ".join(field.label.lower() for field in fields)
    combined_text = f"{lower_title} {full_text.lower()} {field_labels}"

    suggestions: List[CORElementSuggestion] = []

    for element_number, keywords in COR_ELEMENT_KEYWORDS.items():
        element = get_cor_element(element_number)
        if element is None:
            continue

        score = 0
        reasons: List[str] = []

        for keyword in keywords.primary:
            if keyword in combined_text:
                score += PRIMARY_KEYWORD_SCORE
                reasons.append(f'Contains "{keyword}"')

        for keyword in keywords.secondary:
            if keyword in combined_text:
                score += SECONDARY_KEYWORD_SCORE

        # Form types are matched against the title only
        for form_type in keywords.form_types:
            if form_type.replace("_", " ") in lower_title or form_type in lower_title:
                score += FORM_TYPE_SCORE
                reasons.append(f'Form type matches "{form_type}"')

        if analysis.suggested_cor_element == element_number:
            score += ANALYSIS_AGREEMENT_SCORE
            reasons.append("AI analysis suggests this element")

        confidence = min(round_half_up(score), MAX_CONFIDENCE)
        if confidence < MIN_SUGGESTION_CONFIDENCE:
            continue

        suggestions.append(CORElementSuggestion(
            element_number=element_number,
            element_name=element.name,
            confidence=confidence,
            reasoning=(
                "; ".join(reasons[:MAX_REASONS])
                if reasons
                else f"Content matches Element {element_number} patterns"
            ),
            related_questions=get_related_audit_questions(element, combined_text),
        ))

    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    suggestions = suggestions[:MAX_SUGGESTIONS]

    if suggestions:
        top = suggestions[0]
        logger.info(
            f"Top COR suggestion for '{analysis.form_title}': Element {top.element_number} "
            f"({top.confidence}%), {len(suggestions)} suggestion(s) total"
        )
    else:
        logger.info(f"No COR element suggestions for '{analysis.form_title}'")

    return suggestions


def get_related_audit_questions(element: CORElement, combined_text: str) -> List[AuditQuestionSuggestion]:
    """Find the audit questions of an element that a form's content speaks to.

    Args:
        element: Element whose questions are scored
        combined_text: Lowercased title, text and field labels of the form

    Returns:
        Up to five questions scoring above 20, most relevant first
    """
    suggestions: List[AuditQuestionSuggestion] = []

    for question in element.audit_questions:
        relevance_score = _score_question(question, combined_text)
        if relevance_score > MIN_QUESTION_RELEVANCE:
            suggestions.append(AuditQuestionSuggestion(
                question_id=question.id,
                question_text=question.question,
                relevance_score=min(relevance_score, 100),
            ))

    suggestions.sort(key=lambda s: s.relevance_score, reverse=True)
    return suggestions[:MAX_RELATED_QUESTIONS]


def _score_question(question: AuditQuestion, combined_text: str) -> int:
    score = 0

    for word in question.question.lower().split():
        if len(word) > 4 and word in combined_text:
            score += QUESTION_WORD_SCORE

    for evidence_type in question.evidence_types:
        if evidence_type in combined_text:
            score += EVIDENCE_TYPE_SCORE

    # Forms are documentation evidence first and foremost
    if question.category == QuestionCategory.DOCUMENTATION:
        score += DOCUMENTATION_BONUS

    return score


def matches_element(
    element_number: int,
    form_title: str,
    form_description: str,
    field_labels: Sequence[str],
) -> ElementMatch:
    """Check a form against a single element using keyword hits only.

    Unlike ``suggest_cor_elements`` this ignores form-type fragments and the
    extractor's guess, caps at 100 and matches from a confidence of 30.
    """
    keywords = COR_ELEMENT_KEYWORDS.get(element_number)
    if keywords is None:
        return ElementMatch(matches=False, confidence=0, reasons=["Unknown element number"])

    combined_text = f"{form_title} {form_description} {' '.join(field_labels)}".lower()
    reasons: List[str] = []
    score = 0

    for keyword in keywords.primary:
        if keyword in combined_text:
            score += PRIMARY_KEYWORD_SCORE
            reasons.append(f'Contains primary keyword: "{keyword}"')

    for keyword in keywords.secondary:
        if keyword in combined_text:
            score += SECONDARY_KEYWORD_SCORE

    confidence = min(score, 100)

    return ElementMatch(
        matches=confidence >= MATCH_THRESHOLD,
        confidence=confidence,
        reasons=reasons[:MAX_REASONS],
    )


def get_all_cor_elements() -> List[ElementSummary]:
    """List all COR elements without their audit questions."""
    return [
        ElementSummary(
            number=element.number,
            name=element.name,
            description=element.description,
            weight=element.weight,
        )
        for element in COR_ELEMENTS
    ]


def get_audit_questions_for_element(element_number: int) -> List[AuditQuestion]:
    element: Optional[CORElement] = get_cor_element(element_number)
    return list(element.audit_questions) if element else []


def get_required_forms_for_element(element_number: int) -> List[str]:
    element: Optional[CORElement] = get_cor_element(element_number)
    return list(element.required_forms) if element else []
