"""Unit tests for student and course code generation and roster helpers."""

import pytest
from datetime import date

from classpass.models.enums import CourseCategory, ParentType
from classpass.schemas.student import StudentCreate, ParentBase
from classpass.services.course_service import CourseService
from classpass.services.student_service import StudentService


# ---------------------------------------------------------------------------
# Student codes
# ---------------------------------------------------------------------------

def test_first_student_code_of_year():
    assert StudentService.next_student_code([], 2025) == "STD2025001"


def test_next_student_code_skips_foreign_codes():
    existing = ["STD2025001", "STD2025007", "STD2024099", "IMPORTED-1", None]
    assert StudentService.next_student_code(existing, 2025) == "STD2025008"


@pytest.mark.parametrize(
    "birth_date, expected",
    [
        (date(2015, 6, 1), 10),
        (date(2015, 6, 2), 9),
        (None, None),
    ],
)
def test_calculate_age(birth_date, expected):
    assert StudentService.calculate_age(birth_date, date(2025, 6, 1)) == expected


# ---------------------------------------------------------------------------
# Parents
# ---------------------------------------------------------------------------

def test_split_parent_name():
    assert StudentService.split_parent_name(" Malee  Test ") == ("Malee", "Test")
    assert StudentService.split_parent_name("Malee") == ("Malee", "")


def test_parent_shorthand_builds_primary_contact():
    student_in = StudentCreate(
        first_name="Somchai", last_name="Test", parent_name="Malee Test", parent_phone="0812345678"
    )
    parents = StudentService.build_parents(student_in)
    assert len(parents) == 1
    assert parents[0].first_name == "Malee"
    assert parents[0].last_name == "Test"
    assert parents[0].phone == "0812345678"
    assert parents[0].is_primary_contact is True
    assert parents[0].type == ParentType.MOTHER


def test_explicit_parents_take_precedence():
    student_in = StudentCreate(
        first_name="Somchai",
        last_name="Test",
        parent_name="Ignored Name",
        parents=[ParentBase(type=ParentType.FATHER, first_name="Somsak", is_primary_contact=True)],
    )
    parents = StudentService.build_parents(student_in)
    assert [p.first_name for p in parents] == ["Somsak"]
    assert parents[0].type == ParentType.FATHER


def test_no_parent_information():
    assert StudentService.build_parents(StudentCreate(first_name="A", last_name="B", parent_name="  ")) == []


# ---------------------------------------------------------------------------
# Course codes
# ---------------------------------------------------------------------------

def test_course_code_prefix():
    assert CourseService.code_prefix(CourseCategory.SPORT, 2025) == "SPO25"
    assert CourseService.code_prefix(CourseCategory.LANGUAGE, 2031) == "LAN31"


def test_next_course_code_per_category():
    existing = ["SPO25001", "SPO25002", "ART25009"]
    assert CourseService.next_course_code(existing, CourseCategory.SPORT, 2025) == "SPO25003"
    assert CourseService.next_course_code(existing, CourseCategory.ACADEMIC, 2025) == "ACA25001"
