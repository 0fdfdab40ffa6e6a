#!/usr/bin/env python3
"""Analyze a paper safety form PDF and show what the converter detects."""

import argparse
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from loguru import logger
from modules.cor_mapper.mapper import suggest_cor_elements
from modules.form_converter.extractor import analyze_pdf_content
from modules.form_converter.pdf_text import extract_text_from_pdf
from shared.exceptions import PDFExtractionError

# Configure logger
logger.remove()
logger.add(sys.stderr, level="INFO", format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>")


def analyze_form(pdf_path: Path, show_text: bool = False) -> int:
    """Run extraction, field detection and COR mapping on one PDF."""
    try:
        pdf_text = extract_text_from_pdf(pdf_path.read_bytes())
    except PDFExtractionError as e:
        logger.error(e.message)
        return 1

    result = analyze_pdf_content(pdf_text.text, pdf_text.page_count, pdf_path.name)
    analysis = result.analysis
    fields_by_code = {field.field_code: field for field in result.detected_fields}

    logger.info(f"Analyzing {pdf_path.name} - {pdf_text.page_count} pages")
    logger.info("=" * 80)

    if show_text:
        logger.info(f"\nExtracted text:\n{pdf_text.text}")

    logger.info(f"Title: {analysis.form_title}")
    logger.info(f"Description: {analysis.form_description}")
    logger.info(f"Frequency: {analysis.suggested_frequency.value}")
    logger.info(f"Confidence: {analysis.confidence_score}%")
    logger.info(analysis.processing_notes)

    for section in analysis.detected_sections:
        logger.info(f"\n[{section.order}] {section.title}")
        for field_id in section.field_ids:
            field = fields_by_code[field_id]
            options = ""
            if field.suggested_options:
                options = f" options: {', '.join(o.label for o in field.suggested_options)}"
            required = " (required)" if field.suggested_validation and field.suggested_validation.required else ""
            logger.info(
                f"  {field.detected_label}{required} -> {field.suggested_type.value} "
                f"({field.type_confidence}%){options}"
            )

    suggestions = suggest_cor_elements(analysis, result.detected_fields, pdf_text.text)
    logger.info("\nCOR element suggestions:")
    if not suggestions:
        logger.info("  None")
    for suggestion in suggestions:
        logger.info(
            f"  Element {suggestion.element_number} {suggestion.element_name}: "
            f"{suggestion.confidence}% - {suggestion.reasoning}"
        )
        for question in suggestion.related_questions:
            logger.info(f"    {question.question_id} ({question.relevance_score}) {question.question_text}")

    return 0


def main():
    parser = argparse.ArgumentParser(description="Analyze a safety form PDF for conversion")
    parser.add_argument("pdf", type=Path, help="PDF form to analyze")
    parser.add_argument(
        "--show-text",
        action="store_true",
        help="Print the extracted text as well"
    )

    args = parser.parse_args()

    if not args.pdf.exists():
        logger.error(f"File not found: {args.pdf}")
        return 1

    return analyze_form(args.pdf, args.show_text)


if __name__ == "__main__":
    sys.exit(main())
