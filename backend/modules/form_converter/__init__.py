"""PDF-to-digital form converter module.

This module handles:
- Text extraction from uploaded PDF forms
- Section, field and field-type detection
- Building publishable form templates from reviewed fields
"""

from .extractor import FormStructureExtractor, analyze_pdf_content
from .models import (
    AIAnalysisResult,
    AnalysisResult,
    DetectedField,
    DetectedSection,
    FieldOption,
    FieldType,
    ValidationRules,
)
from .patterns import detect_field_type
from .pdf_text import extract_text_from_pdf

__all__ = [
    "FormStructureExtractor",
    "analyze_pdf_content",
    "detect_field_type",
    "extract_text_from_pdf",
    "AIAnalysisResult",
    "AnalysisResult",
    "DetectedField",
    "DetectedSection",
    "FieldOption",
    "FieldType",
    "ValidationRules",
]
