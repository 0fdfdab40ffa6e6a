"""COR element mapping module for converted safety forms."""

from .elements import COR_ELEMENTS, NON_COR_CATEGORIES
from .mapper import matches_element, suggest_cor_elements
from .models import CORElementSuggestion, ElementMatch

__all__ = [
    "COR_ELEMENTS",
    "NON_COR_CATEGORIES",
    "suggest_cor_elements",
    "matches_element",
    "CORElementSuggestion",
    "ElementMatch",
]
