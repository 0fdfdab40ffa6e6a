"""Tests for building form templates from conversion sessions."""

from datetime import datetime, timezone

import pytest

from modules.form_converter.models import (
    AIAnalysisResult,
    FieldOption,
    FieldType,
    Frequency,
    ValidationRules,
)
from modules.form_converter.template_builder import (
    build_form_template,
    generate_form_code,
    organize_fields_by_section,
)
from modules.storage.models import (
    ConversionSession,
    PDFUpload,
    SectionConfig,
    StoredField,
    WorkflowConfig,
)
from shared.exceptions import ConversionError


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _field(code: str, label: str, field_type: FieldType = FieldType.TEXT, **kwargs) -> StoredField:
    return StoredField(
        upload_id="upload-1",
        field_code=code,
        detected_label=label,
        suggested_type=field_type,
        type_confidence=85,
        **kwargs,
    )


@pytest.fixture
def upload():
    return PDFUpload(
        id="upload-1",
        file_name="Daily Hazard Assessment.PDF",
        ai_analysis=AIAnalysisResult(
            form_title="DAILY HAZARD ASSESSMENT",
            form_description="Purpose",
            suggested_frequency=Frequency.DAILY,
            confidence_score=90,
        ),
    )


@pytest.fixture
def fields():
    return [
        _field("jobsite_location", "Jobsite Location", FieldType.GPS),
        _field("date", "Date", FieldType.DATE),
        _field("hazard_rating", "Hazard Rating", FieldType.RATING),
        _field("worker_signature", "Worker Signature", FieldType.SIGNATURE),
    ]


class TestGenerateFormCode:
    """Test form code generation."""

    def test_code_shape(self):
        """Test the base name and base-36 millisecond stamp."""
        millis = int(NOW.timestamp() * 1000)
        stamp = ""
        value = millis
        while value:
            value, remainder = divmod(value, 36)
            stamp = "0123456789abcdefghijklmnopqrstuvwxyz"[remainder] + stamp

        code = generate_form_code("Daily Hazard Assessment.pdf", now=NOW)

        assert code == f"pdf_daily_hazard_assessm_{stamp[-4:]}"

    def test_extension_is_case_insensitive(self):
        assert generate_form_code("FLHA.PDF", now=NOW).startswith("pdf_flha_")

    def test_symbols_collapse(self):
        assert generate_form_code("JHA -- Rev 2 (final).pdf", now=NOW).startswith("pdf_jha_rev_2_final__")


class TestOrganizeFields:
    """Test grouping fields into sections."""

    def test_fields_follow_section_ids(self, fields):
        """Test fields are matched by code or id and ungrouped fields go first."""
        sections = [
            SectionConfig(id="general", title="General", order=0, field_ids=["date"]),
            SectionConfig(id="sign_off", title="Sign Off", order=1, field_ids=[fields[3].id]),
        ]

        grouped = organize_fields_by_section(fields, sections)

        assert [f.field_code for f in grouped["general"]] == ["date", "jobsite_location", "hazard_rating"]
        assert [f.field_code for f in grouped["sign_off"]] == ["worker_signature"]

    def test_first_listing_section_wins(self, fields):
        sections = [
            SectionConfig(id="a", title="A", order=0, field_ids=["date"]),
            SectionConfig(id="b", title="B", order=1, field_ids=["date"]),
        ]

        grouped = organize_fields_by_section(fields[1:2], sections)

        assert len(grouped["a"]) == 1
        assert grouped["b"] == []

    def test_no_sections(self, fields):
        assert organize_fields_by_section(fields, []) == {}


class TestBuildFormTemplate:
    """Test form template materialization."""

    def test_defaults(self, upload, fields):
        """Test a session without edits produces a default template."""
        session = ConversionSession(upload_id=upload.id)

        template = build_form_template(session, upload, fields, now=NOW)

        assert template.form_code.startswith("pdf_daily_hazard_assessm_")
        assert template.name == "Daily Hazard Assessment"
        assert template.description == "Converted from Daily Hazard Assessment.PDF"
        assert template.frequency == Frequency.DAILY
        assert template.estimated_time_minutes == 7
        assert template.cor_element is None
        assert template.icon == "file-scan"
        assert template.source_upload_id == "upload-1"

        assert [s.title for s in template.sections] == ["Form Fields"]
        assert [f.field_code for f in template.sections[0].fields] == [
            "jobsite_location", "date", "hazard_rating", "worker_signature",
        ]
        assert [f.order_index for f in template.sections[0].fields] == [0, 1, 2, 3]

        workflow = template.workflow
        assert workflow.submit_to_role == "supervisor"
        assert workflow.notify_roles == ["admin"]
        assert workflow.sync_priority == 3
        assert workflow.auto_create_evidence
        assert workflow.evidence_audit_element is None

    def test_user_overrides_and_exclusions(self, upload, fields):
        """Test edited values are used and excluded fields dropped."""
        fields[0] = fields[0].model_copy(update={"is_excluded": True})
        fields[2] = fields[2].model_copy(update={
            "user_label": "Overall Risk",
            "user_type": FieldType.RADIO,
            "user_options": [FieldOption(value="low", label="Low"), FieldOption(value="high", label="High")],
            "user_validation": ValidationRules(required=True),
        })
        session = ConversionSession(
            upload_id=upload.id,
            form_name="Field Level Hazard Assessment",
            form_description="Complete before each task",
            form_code="flha",
            cor_element=2,
        )

        template = build_form_template(session, upload, fields)

        assert template.form_code == "flha"
        assert template.name == "Field Level Hazard Assessment"
        assert template.cor_element == 2
        assert template.workflow.evidence_audit_element == "Element 2"
        assert template.estimated_time_minutes == 7

        rendered = template.sections[0].fields
        assert [f.field_code for f in rendered] == ["date", "hazard_rating", "worker_signature"]
        assert rendered[1].label == "Overall Risk"
        assert rendered[1].field_type == FieldType.RADIO
        assert [o.value for o in rendered[1].options] == ["low", "high"]
        assert rendered[1].validation_rules.required

    def test_configured_sections(self, upload, fields):
        session = ConversionSession(
            upload_id=upload.id,
            sections_config=[
                SectionConfig(id="general", title="General", order=0, field_ids=["jobsite_location", "date"]),
                SectionConfig(id="sign_off", title="Sign Off", order=1, field_ids=["worker_signature"]),
            ],
            workflow_config=WorkflowConfig(submit_to_role="safety_manager", requires_approval=True),
        )

        template = build_form_template(session, upload, fields, now=NOW)

        assert [(s.title, s.order_index) for s in template.sections] == [("General", 0), ("Sign Off", 1)]
        assert [f.field_code for f in template.sections[0].fields] == [
            "jobsite_location", "date", "hazard_rating",
        ]
        assert template.workflow.submit_to_role == "safety_manager"
        assert template.workflow.requires_approval
        assert template.workflow.notify_roles == ["admin"]

    def test_not_cor_related(self, upload, fields):
        session = ConversionSession(
            upload_id=upload.id,
            cor_element=6,
            is_cor_related=False,
            custom_category="operations",
        )

        template = build_form_template(session, upload, fields, now=NOW)

        assert template.cor_element is None
        assert template.custom_category == "operations"
        assert not template.workflow.auto_create_evidence
        assert template.workflow.evidence_audit_element is None

    def test_no_fields(self, upload):
        template = build_form_template(ConversionSession(upload_id=upload.id), upload, [], now=NOW)

        assert template.sections == []
        assert template.estimated_time_minutes == 5

    def test_frequency_without_analysis(self, fields):
        upload = PDFUpload(id="upload-2", file_name="visitor_log.pdf")

        template = build_form_template(ConversionSession(upload_id=upload.id), upload, fields, now=NOW)

        assert template.frequency == Frequency.AS_NEEDED
        assert template.name == "visitor_log"

    def test_duplicate_form_code(self, upload, fields):
        session = ConversionSession(upload_id=upload.id, form_code="flha")

        with pytest.raises(ConversionError) as exc_info:
            build_form_template(session, upload, fields, form_code_exists=lambda code: code == "flha")

        assert exc_info.value.message == "Form code already exists"
        assert exc_info.value.details["form_code"] == "flha"
