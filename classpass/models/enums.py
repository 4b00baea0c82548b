"""Centralized Enum Definitions"""

import enum


# Tenancy & plans
class SchoolPlan(str, enum.Enum):
    """Subscription plans with preset quotas"""
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"


# Users & authentication
class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    SUPERADMIN = "superadmin"
    OWNER = "owner"
    ADMIN = "admin"
    TEACHER = "teacher"


# Students
class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class StudentStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    GRADUATED = "graduated"
    SUSPENDED = "suspended"


class ParentType(str, enum.Enum):
    FATHER = "father"
    MOTHER = "mother"
    GUARDIAN = "guardian"


# Courses
class CourseCategory(str, enum.Enum):
    ACADEMIC = "academic"
    SPORT = "sport"
    ART = "art"
    LANGUAGE = "language"
    OTHER = "other"


class CourseStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class DayOfWeek(str, enum.Enum):
    """Weekly session days, ordered Monday first like date.weekday()"""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


# Packages & credits
class ValidityType(str, enum.Enum):
    MONTHS = "months"
    DAYS = "days"
    UNLIMITED = "unlimited"


class PackageStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    TRANSFER = "transfer"
    CREDIT_CARD = "credit_card"
    PROMPTPAY = "promptpay"


class CreditStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    DEPLETED = "depleted"
    SUSPENDED = "suspended"


class AdjustmentType(str, enum.Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


# Attendance
class CheckInMethod(str, enum.Enum):
    MANUAL = "manual"
    QR_CODE = "qr_code"
    FACE_RECOGNITION = "face_recognition"


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"
    HOLIDAY = "holiday"
    CANCELLED = "cancelled"


# Reports
class TimeRange(str, enum.Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
