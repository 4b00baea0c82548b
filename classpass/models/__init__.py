"""Models Package - Export all models for easy imports"""

from classpass.models.base import BaseModel, SchoolScopedMixin, SoftDeleteMixin, StatusMixin
from classpass.models.enums import *
from classpass.models.school import School
from classpass.models.user import User
from classpass.models.student import Student, StudentParent
from classpass.models.course import Course, CourseSession
from classpass.models.package import CreditPackage
from classpass.models.credit import StudentCredit, CreditAdjustment
from classpass.models.attendance import Attendance
from classpass.models.system_log import SystemLog


__all__ = [
    # Base classes
    "BaseModel",
    "SchoolScopedMixin",
    "SoftDeleteMixin",
    "StatusMixin",

    # Tenancy
    "School",
    "User",
    "SystemLog",

    # Roster & catalog
    "Student",
    "StudentParent",
    "Course",
    "CourseSession",

    # Credits
    "CreditPackage",
    "StudentCredit",
    "CreditAdjustment",
    "Attendance",
]
