"""Custom exceptions for the COR Pathways form converter."""

from typing import Any, Dict, Optional


class CORPathwaysException(Exception):
    """Base exception for all COR Pathways errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DocumentProcessingError(CORPathwaysException):
    """Raised when document processing fails."""
    pass


class PDFExtractionError(DocumentProcessingError):
    """Raised when text cannot be extracted from a PDF."""
    pass


class ConversionError(CORPathwaysException):
    """Raised when a conversion session cannot be turned into a form template."""
    pass


class StorageError(CORPathwaysException):
    """Raised when storage operations fail."""
    pass


class NotFoundError(CORPathwaysException):
    """Raised when a requested upload, session or field does not exist."""
    pass
