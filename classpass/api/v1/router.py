"""API V1 Router"""

from fastapi import APIRouter

# Import endpoint routers
from classpass.api.v1.endpoints import (
    auth, schools, users, students, courses, packages,
    credits, attendance, reports, dashboard, superadmin
)

# Create API v1 router
api_router = APIRouter()

# Include endpoint routers with prefixes and tags
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(schools.router, prefix="/schools", tags=["School Configuration"])
api_router.include_router(users.router, prefix="/users", tags=["Staff"])
api_router.include_router(students.router, prefix="/students", tags=["Student Management"])
api_router.include_router(courses.router, prefix="/courses", tags=["Courses"])
api_router.include_router(packages.router, prefix="/packages", tags=["Credit Packages"])
api_router.include_router(credits.router, prefix="/credits", tags=["Credits"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(superadmin.router, prefix="/superadmin", tags=["Super Admin"])
