"""Tests for conversion storage models."""

import pytest
from pydantic import ValidationError

from modules.form_converter.models import DetectedField, DetectedSection, FieldType, ValidationRules
from modules.storage.models import (
    CONVERSION_STEPS,
    ConversionSession,
    ConversionStep,
    FieldUpdate,
    SectionConfig,
    StoredField,
    TemplateWorkflow,
)


class TestStoredField:
    """Test StoredField model."""

    def test_from_detected(self):
        """Test a detected field keeps its values when stored."""
        detected = DetectedField(
            field_code="date",
            detected_label="Date",
            suggested_type=FieldType.DATE,
            type_confidence=85,
            suggested_validation=ValidationRules(required=True),
            section_label="General",
        )

        stored = StoredField.from_detected(detected, "upload-1")

        assert stored.upload_id == "upload-1"
        assert stored.id
        assert stored.field_code == "date"
        assert stored.suggested_validation.required
        assert stored.section_label == "General"

    def test_overrides_take_precedence(self):
        """Test resolved values prefer the user's edits."""
        field = StoredField(
            upload_id="upload-1",
            field_code="name",
            detected_label="Name",
            suggested_type=FieldType.TEXT,
            type_confidence=50,
            user_label="Worker Name",
            user_type=FieldType.WORKER_SELECT,
        )

        assert field.label == "Worker Name"
        assert field.field_type == FieldType.WORKER_SELECT
        assert field.validation == ValidationRules(required=False)

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            StoredField(
                upload_id="upload-1",
                field_code="name",
                detected_label="Name",
                suggested_type=FieldType.TEXT,
                type_confidence=101,
            )


class TestConversionSession:
    """Test ConversionSession model."""

    def test_defaults(self):
        session = ConversionSession(upload_id="upload-1")

        assert session.current_step == ConversionStep.REVIEW_OCR
        assert session.is_cor_related
        assert session.sections_config == []
        assert session.workflow_config.submit_to_role is None

    def test_cor_element_range(self):
        with pytest.raises(ValidationError):
            ConversionSession(upload_id="upload-1", cor_element=15)

    def test_section_config_from_detected(self):
        section = DetectedSection(id="section_1", title="Hazards", order=1, field_ids=["hazard_rating"])

        config = SectionConfig.from_detected(section)

        assert config.field_ids == ["hazard_rating"]
        assert not config.is_repeatable

    def test_steps_in_wizard_order(self):
        assert [info.step for info in CONVERSION_STEPS] == list(ConversionStep)


class TestUpdates:
    """Test partial update models."""

    def test_only_set_values_are_dumped(self):
        update = FieldUpdate(field_id="f1", is_excluded=True)

        assert update.model_dump(exclude_unset=True, exclude={"field_id"}) == {"is_excluded": True}

    def test_template_workflow_defaults(self):
        workflow = TemplateWorkflow()

        assert workflow.submit_to_role == "supervisor"
        assert workflow.notify_roles == ["admin"]
        assert workflow.sync_priority == 3
