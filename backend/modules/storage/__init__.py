"""Storage module for COR Pathways - persists PDF conversions.

This module provides:
- SQLite persistence for uploads, detected fields and conversion sessions
- Storage of the form templates produced by a conversion
"""

from .models import (
    ConversionSession,
    ConversionStep,
    FieldUpdate,
    FormTemplate,
    PDFUpload,
    SessionUpdate,
    StoredField,
    UploadStatus,
)
from .sqlite_handler import ConversionStore

__all__ = [
    "ConversionStore",
    "ConversionSession",
    "ConversionStep",
    "FieldUpdate",
    "FormTemplate",
    "PDFUpload",
    "SessionUpdate",
    "StoredField",
    "UploadStatus",
]
