"""Keyword tables for scoring forms against COR elements."""

from types import MappingProxyType
from typing import Mapping

from .models import ElementKeywords


def _keywords(primary, secondary, form_types) -> ElementKeywords:
    return ElementKeywords(primary=tuple(primary), secondary=tuple(secondary), form_types=tuple(form_types))


COR_ELEMENT_KEYWORDS: Mapping[int, ElementKeywords] = MappingProxyType({
    1: _keywords(
        ["policy", "commitment", "management commitment", "safety policy", "health and safety policy"],
        ["statement", "declaration", "pledge", "responsibility"],
        ["policy_acknowledgment", "safety_policy", "commitment"],
    ),
    2: _keywords(
        ["hazard assessment", "hazard identification", "risk assessment", "job hazard analysis", "jha"],
        ["hazard", "risk", "danger", "threat", "workplace assessment"],
        ["hazard_assessment", "risk_assessment", "jha", "fha"],
    ),
    3: _keywords(
        ["safe work", "safe practice", "safe procedure", "work method"],
        ["procedure", "method statement", "work instruction", "sop"],
        ["safe_work_practice", "swp", "sop", "procedure"],
    ),
    4: _keywords(
        ["safe job procedure", "task analysis", "critical task", "lockout tagout", "loto"],
        ["step by step", "job steps", "work steps", "sequence"],
        ["sjp", "task_analysis", "loto", "lockout"],
    ),
    5: _keywords(
        ["safety rules", "company rules", "disciplinary", "progressive discipline"],
        ["rules", "regulation", "violation", "enforcement", "consequence"],
        ["safety_rules", "disciplinary", "violation_report"],
    ),
    6: _keywords(
        ["ppe", "protective equipment", "personal protective", "safety equipment"],
        ["hardhat", "gloves", "glasses", "vest", "boots", "respirator", "hearing"],
        ["ppe_assessment", "ppe_issuance", "ppe_inspection", "fit_test"],
    ),
    7: _keywords(
        ["maintenance", "preventative maintenance", "equipment maintenance", "inspection"],
        ["repair", "service", "defect", "malfunction", "pre-use"],
        ["maintenance_log", "equipment_inspection", "pre_use_inspection"],
    ),
    8: _keywords(
        ["training", "orientation", "toolbox talk", "safety meeting", "communication"],
        ["education", "instruction", "briefing", "awareness", "competency"],
        ["training_record", "toolbox_talk", "orientation", "safety_meeting"],
    ),
    9: _keywords(
        ["workplace inspection", "site inspection", "safety inspection", "audit"],
        ["walkaround", "walkthrough", "observation", "deficiency"],
        ["workplace_inspection", "site_inspection", "safety_audit"],
    ),
    10: _keywords(
        ["incident", "accident", "injury", "investigation", "near miss"],
        ["root cause", "corrective action", "witness", "statement", "report"],
        ["incident_report", "incident_investigation", "near_miss", "injury_report"],
    ),
    11: _keywords(
        ["emergency", "evacuation", "fire drill", "emergency response", "first aid"],
        ["alarm", "muster", "escape route", "fire extinguisher", "emergency plan"],
        ["emergency_drill", "evacuation_record", "fire_drill", "emergency_plan"],
    ),
    12: _keywords(
        ["statistics", "records", "tracking", "injury log", "first aid log"],
        ["data", "metrics", "trend", "frequency", "severity"],
        ["injury_log", "first_aid_log", "statistics", "safety_metrics"],
    ),
    13: _keywords(
        ["legislation", "compliance", "regulatory", "legal", "wsib"],
        ["act", "regulation", "code", "standard", "requirement", "posted"],
        ["compliance_checklist", "regulatory", "wsib", "legal_posting"],
    ),
    14: _keywords(
        ["management review", "program review", "system review", "continuous improvement"],
        ["effectiveness", "performance", "objective", "target", "kpi"],
        ["management_review", "safety_meeting", "annual_review"],
    ),
})
