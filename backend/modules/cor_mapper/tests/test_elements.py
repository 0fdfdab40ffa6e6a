"""Tests for the static COR reference tables."""

import pytest
from pydantic import ValidationError

from modules.cor_mapper.elements import COR_ELEMENTS, NON_COR_CATEGORIES, get_cor_element
from modules.cor_mapper.keywords import COR_ELEMENT_KEYWORDS
from modules.cor_mapper.models import QuestionCategory


class TestCORElements:
    """Test the COR element table."""

    def test_fourteen_elements(self):
        assert [element.number for element in COR_ELEMENTS] == list(range(1, 15))

    def test_weights_add_up(self):
        assert sum(element.weight for element in COR_ELEMENTS) == 100

    def test_question_numbering(self):
        """Test question ids are numbered within their element."""
        for element in COR_ELEMENTS:
            assert element.audit_questions
            for index, question in enumerate(element.audit_questions, start=1):
                assert question.id == f"{element.number}.{index}"
                assert question.element_number == element.number
                assert question.max_points == element.weight

    def test_lookup(self):
        element = get_cor_element(11)

        assert element.name == "Emergency Preparedness"
        assert element.audit_questions[1].category == QuestionCategory.DOCUMENTATION
        assert get_cor_element(15) is None

    def test_elements_are_frozen(self):
        with pytest.raises(ValidationError):
            COR_ELEMENTS[0].name = "Changed"

    def test_categories(self):
        assert [c.value for c in NON_COR_CATEGORIES] == [
            "hr", "operations", "quality", "customer", "environmental",
            "finance", "procurement", "project", "other",
        ]


class TestKeywordTables:
    """Test the keyword table used for scoring."""

    def test_every_element_has_keywords(self):
        assert sorted(COR_ELEMENT_KEYWORDS) == list(range(1, 15))
        for keywords in COR_ELEMENT_KEYWORDS.values():
            assert keywords.primary
            assert keywords.secondary
            assert keywords.form_types

    def test_keywords_are_lowercase(self):
        for keywords in COR_ELEMENT_KEYWORDS.values():
            for keyword in keywords.primary + keywords.secondary + keywords.form_types:
                assert keyword == keyword.lower()

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            COR_ELEMENT_KEYWORDS[15] = COR_ELEMENT_KEYWORDS[1]
