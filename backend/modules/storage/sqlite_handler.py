"""SQLite handler for PDF conversion uploads, fields, sessions and templates."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, List, Optional, Sequence

from loguru import logger

from modules.form_converter.models import DetectedSection
from shared.exceptions import NotFoundError, StorageError
from .models import (
    ConversionSession,
    FieldUpdate,
    FormTemplate,
    PDFUpload,
    SectionConfig,
    SessionUpdate,
    StoredField,
    utc_now,
)


class ConversionStore:
    """Persists the state of PDF-to-form conversions in SQLite."""

    def __init__(self, db_path: Path):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection with proper cleanup."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode = WAL")
        try:
            yield conn
        finally:
            conn.close()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS pdf_uploads (
                    id TEXT PRIMARY KEY,
                    file_name TEXT NOT NULL,
                    status TEXT NOT NULL,
                    data_json TEXT NOT NULL,
                    uploaded_at TIMESTAMP NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS detected_fields (
                    id TEXT PRIMARY KEY,
                    upload_id TEXT NOT NULL,
                    field_code TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    is_excluded BOOLEAN DEFAULT FALSE,
                    data_json TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL,
                    FOREIGN KEY (upload_id) REFERENCES pdf_uploads(id) ON DELETE CASCADE
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS conversion_sessions (
                    id TEXT PRIMARY KEY,
                    upload_id TEXT NOT NULL UNIQUE,
                    data_json TEXT NOT NULL,
                    last_activity_at TIMESTAMP NOT NULL,
                    FOREIGN KEY (upload_id) REFERENCES pdf_uploads(id) ON DELETE CASCADE
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS form_templates (
                    id TEXT PRIMARY KEY,
                    form_code TEXT NOT NULL UNIQUE,
                    source_upload_id TEXT NOT NULL,
                    data_json TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_uploads_status ON pdf_uploads(status)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_fields_upload ON detected_fields(upload_id, position)")

            conn.commit()
            logger.info(f"Initialized conversion database at {self.db_path}")

    # Uploads

    def save_upload(self, upload: PDFUpload) -> str:
        """Insert or update an upload record.

        Returns:
            Upload ID
        """
        try:
            with self._get_connection() as conn:
                # Update in place; deleting the row cascades to fields and sessions
                conn.execute("""
                    INSERT INTO pdf_uploads (id, file_name, status, data_json, uploaded_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        file_name = excluded.file_name,
                        status = excluded.status,
                        data_json = excluded.data_json
                """, (
                    upload.id,
                    upload.file_name,
                    upload.status.value,
                    upload.model_dump_json(),
                    upload.uploaded_at.isoformat(),
                ))
                conn.commit()
                logger.debug(f"Saved upload {upload.id} ({upload.status.value})")
                return upload.id
        except sqlite3.Error as e:
            logger.error(f"Failed to save upload: {e}")
            raise StorageError(f"Failed to save upload: {e}")

    def get_upload(self, upload_id: str) -> Optional[PDFUpload]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT data_json FROM pdf_uploads WHERE id = ?", (upload_id,)).fetchone()
            return PDFUpload.model_validate_json(row["data_json"]) if row else None

    def update_upload(self, upload_id: str, **changes: Any) -> PDFUpload:
        """Update attributes of an upload.

        Args:
            upload_id: Upload to update
            **changes: Attribute values (status, ai_analysis, error_message,
                processed_at, completed_at, result_template_id, ...)

        Returns:
            The updated upload

        Raises:
            NotFoundError: If the upload does not exist
        """
        upload = self.get_upload(upload_id)
        if upload is None:
            raise NotFoundError(f"Upload not found: {upload_id}")

        upload = upload.model_copy(update=self._revalidate(upload, changes))
        self.save_upload(upload)
        return upload

    # Detected fields

    def save_detected_fields(self, fields: Sequence[StoredField]) -> int:
        """Save detected fields, keeping their order.

        Returns:
            Number of fields saved
        """
        try:
            with self._get_connection() as conn:
                for position, field in enumerate(fields):
                    self._write_field(conn, field, position)
                conn.commit()
                logger.info(f"Saved {len(fields)} detected field(s)")
                return len(fields)
        except sqlite3.Error as e:
            logger.error(f"Failed to save detected fields: {e}")
            raise StorageError(f"Failed to save detected fields: {e}")

    def _write_field(self, conn: sqlite3.Connection, field: StoredField, position: int) -> None:
        conn.execute("""
            INSERT OR REPLACE INTO detected_fields (
                id, upload_id, field_code, position, is_excluded, data_json, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            field.id,
            field.upload_id,
            field.field_code,
            position,
            field.is_excluded,
            field.model_dump_json(),
            field.updated_at.isoformat(),
        ))

    def get_detected_fields(self, upload_id: str, include_excluded: bool = True) -> List[StoredField]:
        """Get the fields of an upload in detection order."""
        query = "SELECT data_json FROM detected_fields WHERE upload_id = ?"
        if not include_excluded:
            query += " AND is_excluded = 0"
        query += " ORDER BY position"

        with self._get_connection() as conn:
            rows = conn.execute(query, (upload_id,)).fetchall()
            return [StoredField.model_validate_json(row["data_json"]) for row in rows]

    def get_field(self, field_id: str) -> Optional[StoredField]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT data_json FROM detected_fields WHERE id = ?", (field_id,)).fetchone()
            return StoredField.model_validate_json(row["data_json"]) if row else None

    def update_field(self, update: FieldUpdate) -> StoredField:
        """Apply user edits to a field.

        Raises:
            NotFoundError: If the field does not exist
        """
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT position, data_json FROM detected_fields WHERE id = ?",
                    (update.field_id,),
                ).fetchone()
                if not row:
                    raise NotFoundError(f"Field not found: {update.field_id}")

                changes = update.model_dump(exclude_unset=True, exclude={"field_id"})
                field = StoredField.model_validate_json(row["data_json"])
                field = field.model_copy(update={**self._revalidate(field, changes), "updated_at": utc_now()})

                self._write_field(conn, field, row["position"])
                conn.commit()
                logger.debug(f"Updated field {field.id}: {sorted(changes)}")
                return field
        except sqlite3.Error as e:
            logger.error(f"Failed to update field: {e}")
            raise StorageError(f"Failed to update field: {e}")

    # Sessions

    def create_session(
        self,
        upload_id: str,
        sections: Sequence[DetectedSection] = (),
        **attributes: Any,
    ) -> ConversionSession:
        """Create the conversion session of an upload (one per upload).

        Args:
            upload_id: Upload being converted
            sections: Detected sections used as the initial section layout
            **attributes: Initial session values such as form_name or cor_element

        Returns:
            The new session
        """
        session = ConversionSession(
            upload_id=upload_id,
            sections_config=[SectionConfig.from_detected(section) for section in sections],
            **attributes,
        )
        try:
            with self._get_connection() as conn:
                conn.execute("""
                    INSERT INTO conversion_sessions (id, upload_id, data_json, last_activity_at)
                    VALUES (?, ?, ?, ?)
                """, (
                    session.id,
                    session.upload_id,
                    session.model_dump_json(),
                    session.last_activity_at.isoformat(),
                ))
                conn.commit()
                logger.info(f"Created conversion session {session.id} for upload {session.upload_id}")
                return session
        except sqlite3.Error as e:
            logger.error(f"Failed to create session: {e}")
            raise StorageError(f"Failed to create session: {e}")

    def get_session(self, session_id: str) -> Optional[ConversionSession]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT data_json FROM conversion_sessions WHERE id = ?", (session_id,)).fetchone()
            return ConversionSession.model_validate_json(row["data_json"]) if row else None

    def get_session_for_upload(self, upload_id: str) -> Optional[ConversionSession]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT data_json FROM conversion_sessions WHERE upload_id = ?", (upload_id,)
            ).fetchone()
            return ConversionSession.model_validate_json(row["data_json"]) if row else None

    def save_session(self, session: ConversionSession) -> None:
        """Overwrite an existing session."""
        try:
            with self._get_connection() as conn:
                cursor = conn.execute("""
                    UPDATE conversion_sessions SET data_json = ?, last_activity_at = ? WHERE id = ?
                """, (session.model_dump_json(), session.last_activity_at.isoformat(), session.id))
                if cursor.rowcount == 0:
                    raise NotFoundError(f"Session not found: {session.id}")
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to save session: {e}")
            raise StorageError(f"Failed to save session: {e}")

    def update_session(self, update: SessionUpdate) -> ConversionSession:
        """Apply user edits to a session.

        Raises:
            NotFoundError: If the session does not exist
        """
        session = self.get_session(update.session_id)
        if session is None:
            raise NotFoundError(f"Session not found: {update.session_id}")

        changes = update.model_dump(exclude_unset=True, exclude={"session_id"})
        session = session.model_copy(update={**self._revalidate(session, changes), "last_activity_at": utc_now()})
        self.save_session(session)
        logger.debug(f"Updated session {session.id}: {sorted(changes)}")
        return session

    # Form templates

    def save_form_template(self, template: FormTemplate) -> str:
        """Store a published form template.

        Raises:
            StorageError: If the form code is already taken
        """
        try:
            with self._get_connection() as conn:
                conn.execute("""
                    INSERT INTO form_templates (id, form_code, source_upload_id, data_json, created_at)
                    VALUES (?, ?, ?, ?, ?)
                """, (
                    template.id,
                    template.form_code,
                    template.source_upload_id,
                    template.model_dump_json(),
                    template.created_at.isoformat(),
                ))
                conn.commit()
                logger.info(f"Saved form template {template.form_code} ({template.id})")
                return template.id
        except sqlite3.Error as e:
            logger.error(f"Failed to save form template: {e}")
            raise StorageError(f"Failed to save form template: {e}")

    def get_template(self, template_id: str) -> Optional[FormTemplate]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT data_json FROM form_templates WHERE id = ?", (template_id,)).fetchone()
            return FormTemplate.model_validate_json(row["data_json"]) if row else None

    def form_code_exists(self, form_code: str) -> bool:
        with self._get_connection() as conn:
            row = conn.execute("SELECT 1 FROM form_templates WHERE form_code = ?", (form_code,)).fetchone()
            return row is not None

    @staticmethod
    def _revalidate(model, changes: dict) -> dict:
        """Round-trip partial changes through the model so nested values are typed."""
        merged = model.model_dump()
        merged.update(changes)
        validated = type(model).model_validate(merged)
        return {key: getattr(validated, key) for key in changes}
