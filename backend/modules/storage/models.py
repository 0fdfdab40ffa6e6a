"""Data models for PDF conversion storage."""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, ConfigDict

from modules.form_converter.models import (
    AIAnalysisResult,
    DetectedField,
    DetectedSection,
    FieldOption,
    FieldType,
    Frequency,
    ValidationRules,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class UploadStatus(str, Enum):
    """Processing status of an uploaded PDF."""
    PENDING = "pending"
    PROCESSING = "processing"
    ANALYZED = "analyzed"
    MAPPING = "mapping"
    CONVERTING = "converting"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ConversionStep(str, Enum):
    """Steps of the conversion wizard."""
    UPLOAD = "upload"
    REVIEW_OCR = "review_ocr"
    MAP_FIELDS = "map_fields"
    COR_MAPPING = "cor_mapping"
    PREVIEW = "preview"
    PUBLISH = "publish"


class StepInfo(BaseModel):
    step: ConversionStep
    label: str
    description: str


CONVERSION_STEPS: List[StepInfo] = [
    StepInfo(step=ConversionStep.UPLOAD, label="Upload PDF", description="Upload your PDF form"),
    StepInfo(step=ConversionStep.REVIEW_OCR, label="Review Text", description="Review extracted text and fields"),
    StepInfo(step=ConversionStep.MAP_FIELDS, label="Map Fields", description="Configure field types and validation"),
    StepInfo(step=ConversionStep.COR_MAPPING, label="COR Mapping", description="Link to COR elements"),
    StepInfo(step=ConversionStep.PREVIEW, label="Preview", description="Preview the converted form"),
    StepInfo(step=ConversionStep.PUBLISH, label="Publish", description="Publish to form library"),
]


class PDFUpload(BaseModel):
    """An uploaded PDF and the outcome of analyzing it."""
    id: str = Field(default_factory=new_id)
    file_name: str
    file_size_bytes: int = 0
    storage_path: Optional[Path] = None
    status: UploadStatus = UploadStatus.PENDING

    # Analysis
    ocr_text: Optional[str] = None
    page_count: int = 0
    ai_analysis: Optional[AIAnalysisResult] = None
    error_message: Optional[str] = None
    processing_attempts: int = 0

    # Timestamps
    uploaded_at: datetime = Field(default_factory=utc_now)
    processed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    result_template_id: Optional[str] = None


class StoredField(DetectedField):
    """A detected field persisted for review."""
    id: str = Field(default_factory=new_id)
    upload_id: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_detected(cls, field: DetectedField, upload_id: str) -> "StoredField":
        return cls(upload_id=upload_id, **field.model_dump())


class SectionConfig(BaseModel):
    """A section of the form being built."""
    id: str
    title: str
    description: Optional[str] = None
    order: int
    field_ids: List[str] = Field(default_factory=list)
    is_repeatable: bool = False

    @classmethod
    def from_detected(cls, section: DetectedSection) -> "SectionConfig":
        return cls(**section.model_dump())


class WorkflowConfig(BaseModel):
    """Routing options for submissions of the converted form."""
    submit_to_role: Optional[str] = None
    notify_roles: Optional[List[str]] = None
    creates_task: Optional[bool] = None
    requires_approval: Optional[bool] = None
    sync_priority: Optional[int] = None


class ConversionSession(BaseModel):
    """State of one PDF conversion as the user moves through the wizard."""
    id: str = Field(default_factory=new_id)
    upload_id: str
    current_step: ConversionStep = ConversionStep.REVIEW_OCR

    form_name: Optional[str] = None
    form_description: Optional[str] = None
    form_code: Optional[str] = None

    # COR mapping
    cor_element: Optional[int] = Field(default=None, ge=1, le=14)
    cor_element_confirmed: bool = False
    linked_audit_questions: List[str] = Field(default_factory=list)
    is_cor_related: bool = True
    custom_category: Optional[str] = None

    sections_config: List[SectionConfig] = Field(default_factory=list)
    workflow_config: WorkflowConfig = Field(default_factory=WorkflowConfig)

    started_at: datetime = Field(default_factory=utc_now)
    last_activity_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None


class FieldUpdate(BaseModel):
    """User edits to a detected field. Unset attributes are left unchanged."""
    field_id: str
    user_label: Optional[str] = None
    user_type: Optional[FieldType] = None
    user_options: Optional[List[FieldOption]] = None
    user_validation: Optional[ValidationRules] = None
    is_confirmed: Optional[bool] = None
    is_excluded: Optional[bool] = None


class SessionUpdate(BaseModel):
    """User edits to a conversion session. Unset attributes are left unchanged."""
    session_id: str
    current_step: Optional[ConversionStep] = None
    form_name: Optional[str] = None
    form_description: Optional[str] = None
    form_code: Optional[str] = None
    cor_element: Optional[int] = Field(default=None, ge=1, le=14)
    cor_element_confirmed: Optional[bool] = None
    linked_audit_questions: Optional[List[str]] = None
    is_cor_related: Optional[bool] = None
    custom_category: Optional[str] = None
    sections_config: Optional[List[SectionConfig]] = None
    workflow_config: Optional[WorkflowConfig] = None


class TemplateField(BaseModel):
    field_code: str
    label: str
    field_type: FieldType
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    default_value: Optional[str] = None
    options: Optional[List[FieldOption]] = None
    validation_rules: ValidationRules = Field(default_factory=ValidationRules)
    order_index: int
    width: str = "full"


class TemplateSection(BaseModel):
    title: str
    description: Optional[str] = None
    order_index: int
    is_repeatable: bool = False
    fields: List[TemplateField] = Field(default_factory=list)


class TemplateWorkflow(BaseModel):
    submit_to_role: str = "supervisor"
    notify_roles: List[str] = Field(default_factory=lambda: ["admin"])
    creates_task: bool = False
    requires_approval: bool = False
    sync_priority: int = 3
    auto_create_evidence: bool = False
    evidence_audit_element: Optional[str] = None


class FormTemplate(BaseModel):
    """A published digital form built from a conversion session."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=new_id)
    form_code: str
    name: str
    description: str
    cor_element: Optional[int] = Field(default=None, ge=1, le=14)
    linked_audit_questions: List[str] = Field(default_factory=list)
    custom_category: Optional[str] = None
    frequency: Frequency = Frequency.AS_NEEDED
    estimated_time_minutes: int
    icon: str = "file-scan"
    color: str = "#6366f1"
    is_active: bool = True
    is_mandatory: bool = False

    sections: List[TemplateSection] = Field(default_factory=list)
    workflow: TemplateWorkflow = Field(default_factory=TemplateWorkflow)

    # Source PDF reference
    source_upload_id: str
    source_file_name: str
    source_storage_path: Optional[Path] = None

    created_at: datetime = Field(default_factory=utc_now)
