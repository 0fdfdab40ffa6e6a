"""FastAPI router for PDF form conversion endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from loguru import logger
from pydantic import BaseModel, Field

from api.config import settings
from modules.cor_mapper.mapper import suggest_cor_elements
from modules.cor_mapper.models import CORElementSuggestion
from modules.storage.models import (
    ConversionSession,
    ConversionStep,
    FieldUpdate,
    PDFUpload,
    SessionUpdate,
    StoredField,
    UploadStatus,
    utc_now,
)
from modules.storage.sqlite_handler import ConversionStore
from shared.exceptions import ConversionError, CORPathwaysException, NotFoundError, PDFExtractionError
from .extractor import analyze_pdf_content
from .models import AIAnalysisResult, DetectedField
from .pdf_text import extract_text_from_pdf
from .template_builder import build_form_template


router = APIRouter(
    tags=["pdf-converter"],
    responses={404: {"description": "Not found"}},
)

# Dependency to get the conversion store
_conversion_store = None


def get_conversion_store() -> ConversionStore:
    """Get conversion store instance."""
    global _conversion_store
    if _conversion_store is None:
        _conversion_store = ConversionStore(settings.database_path)
    return _conversion_store


def _mark_failed(store: ConversionStore, upload_id: str, message: str) -> None:
    """Record a failed upload; the caller still reports the original error."""
    try:
        store.update_upload(upload_id, status=UploadStatus.FAILED, error_message=message)
    except CORPathwaysException as e:
        logger.error(f"Could not mark upload {upload_id} as failed: {e}")


class AnalyzeTextRequest(BaseModel):
    text: str
    page_count: int = Field(default=1, ge=0)
    file_name: str = "form.pdf"


class AnalyzeTextResponse(BaseModel):
    analysis: AIAnalysisResult
    detected_fields: List[DetectedField]
    cor_suggestions: List[CORElementSuggestion]


class ProcessResponse(BaseModel):
    upload_id: str
    session_id: str
    status: UploadStatus
    page_count: int
    analysis: AIAnalysisResult
    detected_fields: List[StoredField]
    cor_suggestions: List[CORElementSuggestion]


class ConvertRequest(BaseModel):
    session_id: str


class ConvertResponse(BaseModel):
    success: bool = True
    template_id: str
    form_code: str
    message: str = "Form template created successfully"


@router.post("/analyze-text", response_model=AnalyzeTextResponse)
async def analyze_text(request: AnalyzeTextRequest) -> AnalyzeTextResponse:
    """Analyze already extracted text without storing anything."""
    result = analyze_pdf_content(request.text, request.page_count, request.file_name)
    suggestions = suggest_cor_elements(result.analysis, result.detected_fields, request.text)
    return AnalyzeTextResponse(
        analysis=result.analysis,
        detected_fields=result.detected_fields,
        cor_suggestions=suggestions,
    )


@router.post("/process", response_model=ProcessResponse)
async def process_pdf(
    file: UploadFile = File(...),
    store: ConversionStore = Depends(get_conversion_store),
) -> ProcessResponse:
    """Upload a PDF form, detect its fields and open a conversion session.

    Args:
        file: PDF file to convert
        store: Conversion store

    Returns:
        Upload and session ids with the analysis, fields and COR suggestions
    """
    file_name = file.filename or ""
    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    if extension not in settings.allowed_extensions:
        raise HTTPException(status_code=400, detail="Only PDF files are supported")

    try:
        content = await file.read()
    finally:
        await file.close()

    if len(content) > settings.max_upload_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.max_upload_size / 1024 / 1024}MB",
        )

    upload = PDFUpload(
        file_name=file_name,
        file_size_bytes=len(content),
        status=UploadStatus.PROCESSING,
        processing_attempts=1,
    )
    upload.storage_path = settings.upload_dir / f"{upload.id}.pdf"
    upload.storage_path.write_bytes(content)
    store.save_upload(upload)
    logger.info(f"Uploaded form: {file_name} -> {upload.storage_path}")

    try:
        pdf_text = extract_text_from_pdf(content)
    except PDFExtractionError as e:
        store.update_upload(upload.id, status=UploadStatus.FAILED, error_message=e.message)
        raise HTTPException(status_code=422, detail=e.message)

    try:
        result = analyze_pdf_content(pdf_text.text, pdf_text.page_count, file_name)
        analysis = result.analysis
        suggestions = suggest_cor_elements(analysis, result.detected_fields, pdf_text.text)

        fields = [StoredField.from_detected(field, upload.id) for field in result.detected_fields]
        store.save_detected_fields(fields)
        store.update_upload(
            upload.id,
            status=UploadStatus.ANALYZED,
            ocr_text=pdf_text.text,
            page_count=pdf_text.page_count,
            ai_analysis=analysis,
            processed_at=utc_now(),
        )

        cor_element = suggestions[0].element_number if suggestions else analysis.suggested_cor_element
        session = store.create_session(
            upload.id,
            analysis.detected_sections,
            form_name=analysis.form_title,
            form_description=analysis.form_description,
            cor_element=cor_element,
        )
    except Exception as e:
        logger.exception(f"PDF processing failed for upload {upload.id}: {e}")
        _mark_failed(store, upload.id, "Processing failed")
        raise HTTPException(status_code=500, detail="Failed to process PDF. Please try again.")

    return ProcessResponse(
        upload_id=upload.id,
        session_id=session.id,
        status=UploadStatus.ANALYZED,
        page_count=pdf_text.page_count,
        analysis=analysis,
        detected_fields=fields,
        cor_suggestions=suggestions,
    )


@router.get("/session", response_model=ConversionSession)
async def get_session(
    upload_id: Optional[str] = Query(None, description="Upload the session belongs to"),
    session_id: Optional[str] = Query(None, description="Session ID"),
    store: ConversionStore = Depends(get_conversion_store),
) -> ConversionSession:
    """Get a conversion session by its ID or by its upload."""
    if session_id:
        session = store.get_session(session_id)
    elif upload_id:
        session = store.get_session_for_upload(upload_id)
    else:
        raise HTTPException(status_code=400, detail="upload_id or session_id is required")

    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.patch("/session", response_model=ConversionSession)
async def update_session(
    update: SessionUpdate,
    store: ConversionStore = Depends(get_conversion_store),
) -> ConversionSession:
    """Save the user's progress on a conversion session."""
    try:
        return store.update_session(update)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/fields", response_model=List[StoredField])
async def get_fields(
    upload_id: str = Query(..., description="Upload whose fields are listed"),
    include_excluded: bool = Query(True, description="Include fields the user excluded"),
    store: ConversionStore = Depends(get_conversion_store),
) -> List[StoredField]:
    """List the detected fields of an upload."""
    if not store.get_upload(upload_id):
        raise HTTPException(status_code=404, detail="Upload not found")
    return store.get_detected_fields(upload_id, include_excluded)


@router.patch("/fields", response_model=StoredField)
async def update_field(
    update: FieldUpdate,
    store: ConversionStore = Depends(get_conversion_store),
) -> StoredField:
    """Apply the user's edits to a detected field."""
    try:
        return store.update_field(update)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/convert", response_model=ConvertResponse)
async def convert_session(
    request: ConvertRequest,
    store: ConversionStore = Depends(get_conversion_store),
) -> ConvertResponse:
    """Create a form template from a reviewed conversion session."""
    session = store.get_session(request.session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")

    upload = store.get_upload(session.upload_id)
    if not upload:
        raise HTTPException(status_code=404, detail="Upload not found")

    previous_status = upload.status
    store.update_upload(upload.id, status=UploadStatus.CONVERTING)

    try:
        fields = store.get_detected_fields(upload.id, include_excluded=False)
        template = build_form_template(session, upload, fields, form_code_exists=store.form_code_exists)
        store.save_form_template(template)

        completed_at = utc_now()
        store.update_upload(
            upload.id,
            status=UploadStatus.COMPLETED,
            completed_at=completed_at,
            result_template_id=template.id,
        )
        store.save_session(session.model_copy(update={
            "current_step": ConversionStep.PUBLISH,
            "completed_at": completed_at,
            "last_activity_at": completed_at,
        }))
    except ConversionError as e:
        store.update_upload(upload.id, status=previous_status)
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        logger.exception(f"PDF conversion failed for session {session.id}: {e}")
        _mark_failed(store, upload.id, "Conversion failed")
        raise HTTPException(status_code=500, detail="Failed to convert PDF to form. Please try again.")

    logger.info(f"Converted {upload.file_name} into form template {template.form_code}")
    return ConvertResponse(template_id=template.id, form_code=template.form_code)
