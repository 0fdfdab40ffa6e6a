"""Text extraction from uploaded PDF forms."""

import pymupdf as fitz
from loguru import logger

from shared.exceptions import PDFExtractionError
from .models import PDFText


def extract_text_from_pdf(pdf_bytes: bytes) -> PDFText:
    """Extract the text layer of a PDF.

    Args:
        pdf_bytes: Raw PDF file content

    Returns:
        Page texts joined by newlines, the page count and document metadata

    Raises:
        PDFExtractionError: If the bytes cannot be opened or read as a PDF
    """
    try:
        if not pdf_bytes:
            raise ValueError("PDF content is empty")

        with fitz.open(stream=pdf_bytes, filetype="pdf") as pdf_doc:
            if pdf_doc.needs_pass:
                raise ValueError("PDF is encrypted")

            page_texts = [page.get_text() for page in pdf_doc]
            info = {key: value for key, value in (pdf_doc.metadata or {}).items() if value}

            return PDFText(
                text="\n".join(page_texts),
                page_count=pdf_doc.page_count,
                info=info,
            )
    except Exception as e:
        logger.error(f"PDF text extraction failed: {e}")
        raise PDFExtractionError(
            f"Failed to extract text from PDF: {e}",
            details={"error_type": type(e).__name__},
        ) from e
