"""Pydantic models for COR element mapping."""

from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, Field, ConfigDict


class QuestionCategory(str, Enum):
    """How an auditor verifies an audit question."""

    DOCUMENTATION = "documentation"
    INTERVIEW = "interview"
    OBSERVATION = "observation"


class AuditQuestion(BaseModel):
    """A scored question from the COR audit protocol."""

    model_config = ConfigDict(frozen=True)

    id: str
    element_number: int
    question_number: str
    question: str
    category: QuestionCategory
    max_points: int
    evidence_types: Tuple[str, ...] = ()


class CORElement(BaseModel):
    """One of the 14 COR (Certificate of Recognition) audit elements."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1, le=14)
    name: str
    description: str
    weight: int = Field(description="Percentage weight in the audit")
    required_forms: Tuple[str, ...] = ()
    audit_questions: Tuple[AuditQuestion, ...] = ()


class ElementKeywords(BaseModel):
    """Keyword lists used to score a document against one element."""

    model_config = ConfigDict(frozen=True)

    primary: Tuple[str, ...]
    secondary: Tuple[str, ...]
    form_types: Tuple[str, ...]


class ElementSummary(BaseModel):
    """Element listing without audit questions."""

    number: int
    name: str
    description: str
    weight: int


class AuditQuestionSuggestion(BaseModel):
    """An audit question a form could provide evidence for."""

    question_id: str
    question_text: str
    relevance_score: int = Field(ge=0, le=100)


class CORElementSuggestion(BaseModel):
    """A ranked COR element suggestion for a form."""

    element_number: int = Field(ge=1, le=14)
    element_name: str
    confidence: int = Field(ge=0, le=100)
    reasoning: str
    related_questions: List[AuditQuestionSuggestion] = Field(default_factory=list)


class ElementMatch(BaseModel):
    """Result of checking a form against a single element."""

    matches: bool
    confidence: int = Field(ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)


class FormCategory(BaseModel):
    """Category for forms that do not support a COR element."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str
