from typing import List
from uuid import UUID
from decimal import Decimal
import datetime as dt
from pydantic import BaseModel

from classpass.models.enums import TimeRange


class ChartPoint(BaseModel):
    date: dt.date
    amount: Decimal


class RevenueStats(BaseModel):
    total: Decimal
    growth: float
    chart: List[ChartPoint]


class StudentStats(BaseModel):
    total: int
    active: int
    new: int
    growth: float


class AttendanceStats(BaseModel):
    rate: float
    total_sessions: int
    total_checkins: int
    trend: float


class CreditStats(BaseModel):
    sold: int
    used: int
    remaining: int
    expiring_soon: int


class TopCourse(BaseModel):
    course_id: UUID
    name: str
    code: str
    students: int
    revenue: Decimal


class ReportExport(BaseModel):
    report_type: str
    time_range: TimeRange
    generated_at: dt.datetime
    start_date: dt.date
    end_date: dt.date
    revenue: RevenueStats
    students: StudentStats
    attendance: AttendanceStats
    credits: CreditStats
    top_courses: List[TopCourse]
