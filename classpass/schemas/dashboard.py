from typing import Optional, List
from uuid import UUID
from decimal import Decimal
from datetime import datetime, time
from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_students: int
    new_students_this_month: int
    monthly_revenue: Decimal
    revenue_growth: float
    today_attendance_rate: float
    today_classes: int


class RecentActivity(BaseModel):
    id: str
    type: str
    title: str
    description: str
    timestamp: datetime
    student_id: Optional[UUID] = None


class TodayClass(BaseModel):
    course_id: UUID
    course_name: str
    course_code: str
    start_time: time
    end_time: time
    room: Optional[str] = None
    enrolled_count: int
    checked_in: int


class DashboardOverview(BaseModel):
    stats: DashboardStats
    recent_activities: List[RecentActivity]
    today_classes: List[TodayClass]


class OnboardingStep(BaseModel):
    id: str
    title: str
    path: str
    completed: bool


class OnboardingStatus(BaseModel):
    steps: List[OnboardingStep]
    completed_steps: int
    total_steps: int
    is_complete: bool
    next_step: Optional[str] = None
