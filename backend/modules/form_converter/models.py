"""Pydantic models for PDF form analysis."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class FieldType(str, Enum):
    """Field types a converted form can use."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    DROPDOWN = "dropdown"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    MULTISELECT = "multiselect"
    SIGNATURE = "signature"
    PHOTO = "photo"
    FILE = "file"
    GPS = "gps"
    WORKER_SELECT = "worker_select"
    JOBSITE_SELECT = "jobsite_select"
    EQUIPMENT_SELECT = "equipment_select"
    RATING = "rating"
    SLIDER = "slider"
    YES_NO = "yes_no"
    YES_NO_NA = "yes_no_na"
    EMAIL = "email"
    PHONE = "phone"
    CURRENCY = "currency"
    BODY_DIAGRAM = "body_diagram"
    WEATHER = "weather"
    TEMPERATURE = "temperature"
    HIDDEN = "hidden"


class Frequency(str, Enum):
    """How often a form is expected to be filled in."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    AS_NEEDED = "as_needed"


class FieldOption(BaseModel):
    """A selectable option for radio/dropdown fields."""

    value: str
    label: str

    @classmethod
    def from_label(cls, label: str) -> "FieldOption":
        """Build an option whose value is the slug of its label."""
        return cls(value="_".join(label.lower().split()), label=label)


class ValidationRules(BaseModel):
    """Validation rules attached to a field."""

    required: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    pattern: Optional[str] = None
    custom_message: Optional[str] = None


class DetectedSection(BaseModel):
    """An ordered group of fields found in the document."""

    id: str
    title: str
    description: Optional[str] = None
    order: int
    field_ids: List[str] = Field(default_factory=list)


class DetectedField(BaseModel):
    """A field candidate found on a label line."""

    field_code: str = Field(description="Identifier unique within one analysis run")
    detected_label: str
    suggested_type: FieldType
    type_confidence: int = Field(ge=0, le=100)
    page_number: int = 1
    suggested_options: Optional[List[FieldOption]] = None
    suggested_validation: Optional[ValidationRules] = None
    suggested_help_text: Optional[str] = None
    section_label: Optional[str] = None
    section_order: int = 0
    field_order: int = 0

    # User overrides applied during review
    user_label: Optional[str] = None
    user_type: Optional[FieldType] = None
    user_options: Optional[List[FieldOption]] = None
    user_validation: Optional[ValidationRules] = None
    is_confirmed: bool = False
    is_excluded: bool = False

    model_config = ConfigDict(from_attributes=True)

    @property
    def label(self) -> str:
        """Label after user overrides."""
        return self.user_label or self.detected_label

    @property
    def field_type(self) -> FieldType:
        """Type after user overrides."""
        return self.user_type or self.suggested_type

    @property
    def options(self) -> Optional[List[FieldOption]]:
        return self.user_options or self.suggested_options

    @property
    def validation(self) -> ValidationRules:
        return self.user_validation or self.suggested_validation or ValidationRules()


class FieldTypeMatch(BaseModel):
    """Result of classifying a label into a field type."""

    type: FieldType
    confidence: int = Field(ge=0, le=100)
    options: Optional[List[FieldOption]] = None


class AIAnalysisResult(BaseModel):
    """Summary of a form analysis pass."""

    form_title: str
    form_description: str
    suggested_cor_element: Optional[int] = Field(default=None, ge=1, le=14)
    suggested_frequency: Frequency = Frequency.AS_NEEDED
    detected_sections: List[DetectedSection] = Field(default_factory=list)
    processing_notes: str = ""
    confidence_score: int = Field(ge=0, le=100)


class AnalysisResult(BaseModel):
    """Output of analyzing extracted PDF text."""

    analysis: AIAnalysisResult
    detected_fields: List[DetectedField] = Field(default_factory=list)


class PDFText(BaseModel):
    """Text extracted from a PDF file."""

    text: str
    page_count: int
    info: dict = Field(default_factory=dict)
