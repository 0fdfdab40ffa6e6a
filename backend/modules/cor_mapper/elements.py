"""COR audit elements and their audit questions.

Based on the IHSA COR (Certificate of Recognition) audit protocol.
"""

from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

from .models import AuditQuestion, CORElement, FormCategory, QuestionCategory


DOC = QuestionCategory.DOCUMENTATION
INTERVIEW = QuestionCategory.INTERVIEW
OBSERVATION = QuestionCategory.OBSERVATION


def _element(
    number: int,
    name: str,
    description: str,
    weight: int,
    required_forms: Sequence[str],
    questions: Sequence[Tuple[str, QuestionCategory, Sequence[str]]],
) -> CORElement:
    """Build an element; question ids are numbered <element>.<n>, worth ``weight`` points."""
    audit_questions = tuple(
        AuditQuestion(
            id=f"{number}.{index}",
            element_number=number,
            question_number=f"{number}.{index}",
            question=question,
            category=category,
            max_points=weight,
            evidence_types=tuple(evidence),
        )
        for index, (question, category, evidence) in enumerate(questions, start=1)
    )
    return CORElement(
        number=number,
        name=name,
        description=description,
        weight=weight,
        required_forms=tuple(required_forms),
        audit_questions=audit_questions,
    )


COR_ELEMENTS: Tuple[CORElement, ...] = (
    _element(
        1, "Health & Safety Policy",
        "Written health and safety policy signed by senior management", 5,
        ["safety_policy", "policy_acknowledgment"],
        [
            ("Is there a written health and safety policy?", DOC, ["policy"]),
            ("Is the policy signed by senior management?", DOC, ["policy"]),
            ("Is the policy communicated to all workers?", INTERVIEW, ["form", "training"]),
        ],
    ),
    _element(
        2, "Hazard Assessment",
        "Identifying, assessing, and controlling workplace hazards", 10,
        ["hazard_assessment", "hazard_reporting", "jha_form"],
        [
            ("Are formal hazard assessments conducted?", DOC, ["form", "inspection"]),
            ("Are hazard controls implemented and documented?", DOC, ["form"]),
            ("Are workers involved in hazard identification?", INTERVIEW, ["form", "meeting"]),
        ],
    ),
    _element(
        3, "Safe Work Practices",
        "Written safe work procedures and practices", 10,
        ["swp_form", "sop_acknowledgment", "critical_task_analysis"],
        [
            ("Are safe work practices documented?", DOC, ["policy", "form"]),
            ("Are workers trained on safe work practices?", INTERVIEW, ["training"]),
            ("Are safe work practices followed?", OBSERVATION, ["inspection"]),
        ],
    ),
    _element(
        4, "Safe Job Procedures",
        "Step-by-step safe job procedures for critical tasks", 10,
        ["sjp_form", "task_analysis", "lockout_tagout"],
        [
            ("Are safe job procedures written for critical tasks?", DOC, ["policy", "form"]),
            ("Are procedures accessible to workers?", OBSERVATION, ["form"]),
            ("Do workers follow safe job procedures?", INTERVIEW, ["inspection", "training"]),
        ],
    ),
    _element(
        5, "Company Safety Rules",
        "Established safety rules and enforcement procedures", 5,
        ["safety_rules", "rule_violation_report", "disciplinary_action"],
        [
            ("Are company safety rules documented?", DOC, ["policy"]),
            ("Are safety rules communicated to workers?", INTERVIEW, ["training", "form"]),
            ("Is there a progressive discipline system?", DOC, ["policy", "form"]),
        ],
    ),
    _element(
        6, "Personal Protective Equipment",
        "PPE selection, provision, training, and use", 5,
        ["ppe_assessment", "ppe_issuance", "ppe_inspection"],
        [
            ("Is PPE hazard assessment conducted?", DOC, ["form", "inspection"]),
            ("Is PPE provided and maintained?", OBSERVATION, ["form"]),
            ("Are workers trained on PPE use?", INTERVIEW, ["training"]),
        ],
    ),
    _element(
        7, "Preventative Maintenance",
        "Equipment maintenance and inspection programs", 5,
        ["equipment_inspection", "maintenance_log", "pre_use_inspection"],
        [
            ("Is there a preventative maintenance program?", DOC, ["policy", "form"]),
            ("Are equipment inspections documented?", DOC, ["form", "inspection"]),
            ("Is defective equipment taken out of service?", INTERVIEW, ["form"]),
        ],
    ),
    _element(
        8, "Training & Communication",
        "Safety training and communication programs", 10,
        ["training_record", "toolbox_talk", "orientation_checklist"],
        [
            ("Is there a formal training program?", DOC, ["policy", "training"]),
            ("Are training records maintained?", DOC, ["form", "training"]),
            ("Is safety communication effective?", INTERVIEW, ["form", "meeting"]),
        ],
    ),
    _element(
        9, "Workplace Inspections",
        "Regular workplace safety inspections", 10,
        ["workplace_inspection", "inspection_corrective_action", "site_audit"],
        [
            ("Are regular workplace inspections conducted?", DOC, ["form", "inspection"]),
            ("Are inspection findings corrected?", DOC, ["form"]),
            ("Do workers participate in inspections?", INTERVIEW, ["form"]),
        ],
    ),
    _element(
        10, "Incident Investigation",
        "Incident reporting, investigation, and corrective actions", 10,
        ["incident_report", "incident_investigation", "corrective_action", "near_miss_report"],
        [
            ("Is there an incident reporting system?", DOC, ["policy", "form"]),
            ("Are incidents investigated?", DOC, ["form"]),
            ("Are corrective actions implemented?", DOC, ["form"]),
        ],
    ),
    _element(
        11, "Emergency Preparedness",
        "Emergency response plans, drills, and equipment", 5,
        ["emergency_plan", "emergency_drill", "fire_drill_log", "evacuation_record"],
        [
            ("Is there a written emergency response plan?", DOC, ["policy"]),
            ("Are emergency drills conducted?", DOC, ["form", "drill"]),
            ("Do workers know emergency procedures?", INTERVIEW, ["training"]),
        ],
    ),
    _element(
        12, "Statistics & Records",
        "Safety statistics tracking and record keeping", 5,
        ["injury_log", "first_aid_log", "safety_statistics"],
        [
            ("Are safety statistics tracked?", DOC, ["form"]),
            ("Are records properly maintained?", DOC, ["form"]),
            ("Are statistics used for improvement?", INTERVIEW, ["meeting", "form"]),
        ],
    ),
    _element(
        13, "Legislation & Compliance",
        "Compliance with health and safety legislation", 5,
        ["compliance_checklist", "regulatory_update_log", "wsib_form_7"],
        [
            ("Is legislation accessible to workers?", OBSERVATION, ["policy"]),
            ("Is the company compliant with legislation?", DOC, ["form", "inspection"]),
            ("Are regulatory requirements tracked?", DOC, ["form"]),
        ],
    ),
    _element(
        14, "Management Review",
        "Regular management review of safety program", 5,
        ["management_review", "safety_meeting_minutes", "annual_review"],
        [
            ("Does management review the safety program?", DOC, ["meeting", "form"]),
            ("Are improvements identified and implemented?", DOC, ["form"]),
            ("Is senior management committed to safety?", INTERVIEW, ["meeting"]),
        ],
    ),
)

COR_ELEMENTS_BY_NUMBER: Mapping[int, CORElement] = MappingProxyType(
    {element.number: element for element in COR_ELEMENTS}
)

NON_COR_CATEGORIES: Tuple[FormCategory, ...] = (
    FormCategory(value="hr", label="Human Resources"),
    FormCategory(value="operations", label="Operations"),
    FormCategory(value="quality", label="Quality Control"),
    FormCategory(value="customer", label="Customer Service"),
    FormCategory(value="environmental", label="Environmental"),
    FormCategory(value="finance", label="Finance/Accounting"),
    FormCategory(value="procurement", label="Procurement"),
    FormCategory(value="project", label="Project Management"),
    FormCategory(value="other", label="Other/Custom"),
)


def get_cor_element(element_number: int) -> Optional[CORElement]:
    """Look up an element by number."""
    return COR_ELEMENTS_BY_NUMBER.get(element_number)
