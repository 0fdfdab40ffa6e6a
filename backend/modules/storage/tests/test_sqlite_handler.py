"""Tests for the conversion store."""

import sqlite3
import tempfile
from pathlib import Path

import pytest

from modules.form_converter.models import (
    AIAnalysisResult,
    DetectedField,
    DetectedSection,
    FieldOption,
    FieldType,
    Frequency,
)
from modules.storage.models import (
    ConversionSession,
    ConversionStep,
    FieldUpdate,
    FormTemplate,
    PDFUpload,
    SessionUpdate,
    StoredField,
    UploadStatus,
)
from modules.storage.sqlite_handler import ConversionStore
from shared.exceptions import NotFoundError, StorageError


def _detected(code: str, label: str, field_type: FieldType = FieldType.TEXT) -> DetectedField:
    return DetectedField(
        field_code=code,
        detected_label=label,
        suggested_type=field_type,
        type_confidence=85,
    )


class TestConversionStore:
    """Test suite for the conversion store."""

    @pytest.fixture
    def temp_db(self):
        """Create temporary database for testing."""
        with tempfile.TemporaryDirectory() as temp_dir:
            db_path = Path(temp_dir) / "test.db"
            store = ConversionStore(db_path)
            yield store

    @pytest.fixture
    def upload(self, temp_db):
        upload = PDFUpload(file_name="Daily_Hazard.pdf", file_size_bytes=2048)
        temp_db.save_upload(upload)
        return upload

    def test_init_database(self, temp_db):
        """Test database initialization."""
        assert temp_db.db_path.exists()

        with temp_db._get_connection() as conn:
            tables = conn.execute("""
                SELECT name FROM sqlite_master
                WHERE type='table' AND name NOT LIKE 'sqlite_%'
                ORDER BY name
            """).fetchall()

            table_names = [row[0] for row in tables]
            assert table_names == [
                "conversion_sessions",
                "detected_fields",
                "form_templates",
                "pdf_uploads",
            ]

    def test_save_and_get_upload(self, temp_db, upload):
        """Test an upload round-trips through the database."""
        saved = temp_db.get_upload(upload.id)

        assert saved is not None
        assert saved.file_name == "Daily_Hazard.pdf"
        assert saved.file_size_bytes == 2048
        assert saved.status == UploadStatus.PENDING
        assert saved.uploaded_at == upload.uploaded_at

    def test_get_upload_not_found(self, temp_db):
        assert temp_db.get_upload("missing") is None

    def test_update_upload(self, temp_db, upload):
        """Test updating status and analysis of an upload."""
        analysis = AIAnalysisResult(
            form_title="DAILY HAZARD ASSESSMENT",
            form_description="Purpose",
            suggested_frequency=Frequency.DAILY,
            confidence_score=80,
        )

        updated = temp_db.update_upload(
            upload.id,
            status=UploadStatus.ANALYZED,
            ai_analysis=analysis,
            page_count=2,
        )

        assert updated.status == UploadStatus.ANALYZED
        saved = temp_db.get_upload(upload.id)
        assert saved.status == UploadStatus.ANALYZED
        assert saved.page_count == 2
        assert saved.ai_analysis.suggested_frequency == Frequency.DAILY
        assert saved.file_name == "Daily_Hazard.pdf"

    def test_update_upload_not_found(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_upload("missing", status=UploadStatus.FAILED)

    def test_detected_fields_keep_order(self, temp_db, upload):
        """Test fields come back in the order they were saved."""
        fields = [
            StoredField.from_detected(_detected("worker_signature", "Worker Signature"), upload.id),
            StoredField.from_detected(_detected("date", "Date", FieldType.DATE), upload.id),
            StoredField.from_detected(_detected("crew_count", "Crew Count"), upload.id),
        ]

        assert temp_db.save_detected_fields(fields) == 3

        saved = temp_db.get_detected_fields(upload.id)
        assert [f.field_code for f in saved] == ["worker_signature", "date", "crew_count"]
        assert saved[1].suggested_type == FieldType.DATE
        assert saved[1].upload_id == upload.id

    def test_update_field(self, temp_db, upload):
        """Test user overrides are stored and resolved."""
        field = StoredField.from_detected(_detected("check_one", "Check one"), upload.id)
        temp_db.save_detected_fields([field])

        updated = temp_db.update_field(FieldUpdate(
            field_id=field.id,
            user_label="Injury Type",
            user_type=FieldType.RADIO,
            user_options=[{"value": "first_aid", "label": "First Aid"}],
            is_confirmed=True,
        ))

        assert updated.label == "Injury Type"
        assert updated.field_type == FieldType.RADIO
        assert updated.options == [FieldOption(value="first_aid", label="First Aid")]
        assert updated.updated_at >= field.updated_at

        saved = temp_db.get_field(field.id)
        assert saved.user_label == "Injury Type"
        assert saved.detected_label == "Check one"
        assert saved.is_confirmed
        assert not saved.is_excluded

    def test_excluded_fields_are_filtered(self, temp_db, upload):
        """Test excluded fields can be left out of listings."""
        keep = StoredField.from_detected(_detected("date", "Date"), upload.id)
        drop = StoredField.from_detected(_detected("office_use_only", "Office Use Only"), upload.id)
        temp_db.save_detected_fields([keep, drop])

        temp_db.update_field(FieldUpdate(field_id=drop.id, is_excluded=True))

        assert len(temp_db.get_detected_fields(upload.id)) == 2
        included = temp_db.get_detected_fields(upload.id, include_excluded=False)
        assert [f.id for f in included] == [keep.id]

    def test_update_field_not_found(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_field(FieldUpdate(field_id="missing", is_confirmed=True))

    def test_sessions(self, temp_db, upload):
        """Test creating, reading and updating a session."""
        sections = [
            DetectedSection(id="section_0", title="General", order=0, field_ids=["date"]),
            DetectedSection(id="section_1", title="Sign Off", order=1),
        ]

        session = temp_db.create_session(upload.id, sections, form_name="Daily Hazard")

        assert session.current_step == ConversionStep.REVIEW_OCR
        assert [s.title for s in session.sections_config] == ["General", "Sign Off"]
        assert temp_db.get_session(session.id).form_name == "Daily Hazard"
        assert temp_db.get_session_for_upload(upload.id).id == session.id

        updated = temp_db.update_session(SessionUpdate(
            session_id=session.id,
            current_step=ConversionStep.COR_MAPPING,
            cor_element=2,
            cor_element_confirmed=True,
            workflow_config={"submit_to_role": "safety_manager"},
        ))

        assert updated.current_step == ConversionStep.COR_MAPPING
        assert updated.workflow_config.submit_to_role == "safety_manager"
        saved = temp_db.get_session(session.id)
        assert saved.cor_element == 2
        assert saved.form_name == "Daily Hazard"
        assert len(saved.sections_config) == 2

    def test_one_session_per_upload(self, temp_db, upload):
        temp_db.create_session(upload.id)

        with pytest.raises(StorageError):
            temp_db.create_session(upload.id)

    def test_update_session_not_found(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_session(SessionUpdate(session_id="missing", form_name="x"))

    def test_missing_session(self, temp_db):
        assert temp_db.get_session("missing") is None
        assert temp_db.get_session_for_upload("missing") is None

    def test_form_templates(self, temp_db, upload):
        """Test storing templates and detecting taken form codes."""
        template = FormTemplate(
            form_code="pdf_daily_hazard_ab12",
            name="Daily Hazard",
            description="Converted from Daily_Hazard.pdf",
            estimated_time_minutes=8,
            source_upload_id=upload.id,
            source_file_name=upload.file_name,
        )

        assert temp_db.save_form_template(template) == template.id
        assert temp_db.form_code_exists("pdf_daily_hazard_ab12")
        assert not temp_db.form_code_exists("pdf_other_ab12")
        assert temp_db.get_template(template.id).name == "Daily Hazard"
        assert temp_db.get_template("missing") is None

        duplicate = template.model_copy(update={"id": "other-id"})
        with pytest.raises(StorageError):
            temp_db.save_form_template(duplicate)

    def test_database_errors_raise_storage_error(self, temp_db, upload):
        """Test sqlite failures are wrapped."""
        with temp_db._get_connection() as conn:
            conn.execute("DROP TABLE detected_fields")
            conn.commit()

        field = StoredField.from_detected(_detected("date", "Date"), upload.id)
        with pytest.raises(StorageError) as exc_info:
            temp_db.save_detected_fields([field])

        assert "Failed to save detected fields" in exc_info.value.message
        assert isinstance(exc_info.value.__context__, sqlite3.Error)
