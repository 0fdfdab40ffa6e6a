"""Builds publishable form templates from reviewed conversion sessions."""

import math
import re
import string
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from loguru import logger

from modules.storage.models import (
    ConversionSession,
    FormTemplate,
    PDFUpload,
    SectionConfig,
    StoredField,
    TemplateField,
    TemplateSection,
    TemplateWorkflow,
)
from shared.exceptions import ConversionError
from .extractor import DEFAULT_SECTION_TITLE
from .models import Frequency


FORM_CODE_BASE_LENGTH = 20
FORM_CODE_STAMP_LENGTH = 4
MINUTES_PER_FIELD = 0.5
BASE_MINUTES = 5

_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")
_BASE36_DIGITS = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def _base_name(file_name: str) -> str:
    return _PDF_SUFFIX.sub("", file_name)


def generate_form_code(file_name: str, now: Optional[datetime] = None) -> str:
    """Derive a form code from an uploaded file name.

    Args:
        file_name: Original PDF file name
        now: Timestamp used for the suffix (defaults to the current time)

    Returns:
        Code of the form ``pdf_<base>_<stamp>``
    """
    now = now or datetime.now(timezone.utc)
    stamp = _to_base36(int(now.timestamp() * 1000))[-FORM_CODE_STAMP_LENGTH:]
    base = _NON_ALPHANUMERIC.sub("_", _base_name(file_name).lower())[:FORM_CODE_BASE_LENGTH]
    return f"pdf_{base}_{stamp}"


def _belongs_to(field: StoredField, section: SectionConfig) -> bool:
    return field.id in section.field_ids or field.field_code in section.field_ids


def organize_fields_by_section(
    fields: Sequence[StoredField],
    sections: Sequence[SectionConfig],
) -> Dict[str, List[StoredField]]:
    """Group fields under the sections that list them.

    A field goes to the first section naming its id or field code. Fields no
    section names are appended to the first section.

    Returns:
        Mapping of section id to its fields, in field order
    """
    grouped: Dict[str, List[StoredField]] = {section.id: [] for section in sections}
    ungrouped: List[StoredField] = []

    for field in fields:
        section = next((s for s in sections if _belongs_to(field, s)), None)
        if section is None:
            ungrouped.append(field)
        else:
            grouped[section.id].append(field)

    if ungrouped and sections:
        grouped[sections[0].id].extend(ungrouped)

    return grouped


def _template_field(field: StoredField, order_index: int) -> TemplateField:
    return TemplateField(
        field_code=field.field_code,
        label=field.label,
        field_type=field.field_type,
        help_text=field.suggested_help_text,
        options=field.options,
        validation_rules=field.validation,
        order_index=order_index,
    )


def _build_sections(fields: List[StoredField], sections: List[SectionConfig]) -> List[TemplateSection]:
    if not sections:
        if not fields:
            return []
        return [TemplateSection(
            title=DEFAULT_SECTION_TITLE,
            order_index=0,
            fields=[_template_field(field, i) for i, field in enumerate(fields)],
        )]

    grouped = organize_fields_by_section(fields, sections)
    return [
        TemplateSection(
            title=section.title,
            description=section.description,
            order_index=order,
            is_repeatable=section.is_repeatable,
            fields=[_template_field(field, i) for i, field in enumerate(grouped[section.id])],
        )
        for order, section in enumerate(sections)
    ]


def _build_workflow(session: ConversionSession) -> TemplateWorkflow:
    config = session.workflow_config
    evidence_element = None
    if session.is_cor_related and session.cor_element:
        evidence_element = f"Element {session.cor_element}"

    return TemplateWorkflow(
        submit_to_role=config.submit_to_role or "supervisor",
        notify_roles=config.notify_roles or ["admin"],
        creates_task=config.creates_task or False,
        requires_approval=config.requires_approval or False,
        sync_priority=config.sync_priority or 3,
        auto_create_evidence=session.is_cor_related,
        evidence_audit_element=evidence_element,
    )


def build_form_template(
    session: ConversionSession,
    upload: PDFUpload,
    fields: Sequence[StoredField],
    form_code_exists: Optional[Callable[[str], bool]] = None,
    now: Optional[datetime] = None,
) -> FormTemplate:
    """Materialize the form template a conversion session describes.

    Args:
        session: Reviewed conversion session
        upload: Upload the session converts
        fields: Stored fields of the upload; excluded fields are skipped
        form_code_exists: Lookup telling whether a form code is already taken
        now: Timestamp used when a form code has to be generated

    Returns:
        The form template

    Raises:
        ConversionError: If the form code is already taken
    """
    included = [field for field in fields if not field.is_excluded]
    form_code = session.form_code or generate_form_code(upload.file_name, now)

    if form_code_exists is not None and form_code_exists(form_code):
        raise ConversionError(
            "Form code already exists",
            details={"form_code": form_code, "session_id": session.id},
        )

    frequency = Frequency.AS_NEEDED
    if upload.ai_analysis is not None:
        frequency = upload.ai_analysis.suggested_frequency

    template = FormTemplate(
        form_code=form_code,
        name=session.form_name or _base_name(upload.file_name),
        description=session.form_description or f"Converted from {upload.file_name}",
        cor_element=session.cor_element if session.is_cor_related else None,
        linked_audit_questions=session.linked_audit_questions,
        custom_category=session.custom_category,
        frequency=frequency,
        estimated_time_minutes=math.ceil(len(included) * MINUTES_PER_FIELD) + BASE_MINUTES,
        sections=_build_sections(included, session.sections_config),
        workflow=_build_workflow(session),
        source_upload_id=upload.id,
        source_file_name=upload.file_name,
        source_storage_path=upload.storage_path,
    )

    logger.info(
        f"Built form template {form_code} with {len(template.sections)} section(s) "
        f"and {len(included)} field(s)"
    )
    return template
