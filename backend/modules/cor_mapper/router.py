"""FastAPI router for COR element lookups and form matching."""

from typing import Dict, List, Union

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel, Field

from .elements import NON_COR_CATEGORIES, get_cor_element
from .mapper import (
    get_all_cor_elements,
    get_audit_questions_for_element,
    get_required_forms_for_element,
    matches_element,
)
from .models import AuditQuestion, ElementMatch, ElementSummary, FormCategory


router = APIRouter(
    tags=["cor"],
    responses={404: {"description": "Not found"}},
)


class MatchRequest(BaseModel):
    form_title: str
    form_description: str = ""
    field_labels: List[str] = Field(default_factory=list)


def _require_element(element_number: int) -> None:
    if get_cor_element(element_number) is None:
        raise HTTPException(status_code=404, detail=f"COR element not found: {element_number}")


@router.get("/elements", response_model=List[ElementSummary])
async def list_elements() -> List[ElementSummary]:
    """List the 14 COR elements."""
    return get_all_cor_elements()


@router.get("/elements/{element_number}/questions", response_model=List[AuditQuestion])
async def get_element_questions(element_number: int = Path(..., ge=1)) -> List[AuditQuestion]:
    """Get the audit questions of an element."""
    _require_element(element_number)
    return get_audit_questions_for_element(element_number)


@router.get("/elements/{element_number}/required-forms")
async def get_element_required_forms(
    element_number: int = Path(..., ge=1),
) -> Dict[str, Union[int, List[str]]]:
    """Get the form codes an element requires as evidence."""
    _require_element(element_number)
    return {
        "element_number": element_number,
        "required_forms": get_required_forms_for_element(element_number),
    }


@router.post("/elements/{element_number}/match", response_model=ElementMatch)
async def match_element(element_number: int, request: MatchRequest) -> ElementMatch:
    """Check whether a form supports the given element."""
    return matches_element(
        element_number,
        request.form_title,
        request.form_description,
        request.field_labels,
    )


@router.get("/categories", response_model=List[FormCategory])
async def list_categories() -> List[FormCategory]:
    """List the categories available to forms that are not COR related."""
    return list(NON_COR_CATEGORIES)
