"""Demo School Seeding"""

from datetime import date
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from classpass.core.exceptions import ConflictError, ValidationError
from classpass.core.logging import get_logger
from classpass.models.enums import (
    CourseCategory, Gender, PaymentMethod, SchoolPlan, UserRole, ValidityType
)
from classpass.models.user import User
from classpass.schemas.course import CourseCreate
from classpass.schemas.credit import PurchaseRequest
from classpass.schemas.package import PackageCreate
from classpass.schemas.student import StudentCreate
from classpass.schemas.superadmin import DemoSeedRequest
from classpass.services.course_service import CourseService
from classpass.services.credit_service import CreditService
from classpass.services.package_service import PackageService
from classpass.services.school_service import SchoolService
from classpass.services.student_service import StudentService
from classpass.services.superadmin_service import SuperAdminService
from classpass.services.user_service import UserService

logger = get_logger(__name__)

DEMO_SCHOOL = {
    "name": "ClassPass Demo School",
    "address": "123 Sukhumvit Rd, Khlong Toei, Bangkok 10110",
    "phone": "021234567",
    "email": "demo@classpass.school",
    "line_oa": "@classpass_demo",
    "website": "www.classpass-demo.com",
    "business_hours": {
        **{day: {"open": "08:00", "close": "18:00"}
           for day in ("monday", "tuesday", "wednesday", "thursday", "friday")},
        "saturday": {"open": "09:00", "close": "16:00"},
        "sunday": {"open": "09:00", "close": "16:00"},
    },
}

DEMO_STAFF = [
    (UserRole.OWNER, "Somchai", "Owner"),
    (UserRole.ADMIN, "Somying", "Admin"),
    (UserRole.TEACHER, "Somsri", "Teacher"),
]

DEMO_COURSES = [
    ("Math Grade 7", CourseCategory.ACADEMIC, "Algebra and geometry basics for grade 7"),
    ("Basic English", CourseCategory.LANGUAGE, "Listening, speaking, reading and writing for beginners"),
    ("Guitar for Beginners", CourseCategory.ART, "First chords and strumming patterns"),
]

# name, credits, price, validity months, popular, recommended
DEMO_PACKAGES = [
    ("Trial", 4, Decimal("800"), 1, False, False),
    ("Saver", 8, Decimal("1400"), 2, True, False),
    ("Value", 16, Decimal("2500"), 3, False, True),
]

DEMO_STUDENTS = [
    {"first_name": "Napat", "last_name": "Jaidee", "nickname": "Nam", "gender": Gender.FEMALE,
     "birth_date": date(2010, 5, 15), "current_grade": "M.1", "phone": "0891234567",
     "parent_name": "Somsri Jaidee", "parent_phone": "0892345678"},
    {"first_name": "Thanakorn", "last_name": "Rakrian", "nickname": "Boss", "gender": Gender.MALE,
     "birth_date": date(2011, 8, 20), "current_grade": "P.6", "phone": "0893456789",
     "parent_name": "Wichai Rakrian", "parent_phone": "0894567890"},
    {"first_name": "Paphawee", "last_name": "Tangjai", "nickname": "Pai", "gender": Gender.FEMALE,
     "birth_date": date(2009, 12, 10), "current_grade": "M.2", "phone": "0895678901",
     "parent_name": "Pornthip Tangjai", "parent_phone": "0896789012"},
]


class DemoService:
    """Builds a fully populated pro-plan school for demos and sales calls"""

    @staticmethod
    def account_emails(request: DemoSeedRequest) -> Dict[UserRole, str]:
        return {
            UserRole.OWNER: request.owner_email.lower(),
            UserRole.ADMIN: request.admin_email.lower(),
            UserRole.TEACHER: request.teacher_email.lower(),
        }

    @staticmethod
    async def seed_demo(db: AsyncSession, request: DemoSeedRequest, actor: User = None) -> Dict:
        """
        Create the demo school with owner, admin and teacher accounts, three
        courses with three month-based packages each, three students and one
        paid purchase per student.

        Raises:
            ConflictError: DEMO_ALREADY_SEEDED when any demo email is taken
            ValidationError: DUPLICATE_DEMO_EMAIL when two accounts share an email
        """
        emails = DemoService.account_emails(request)
        if len(set(emails.values())) != len(emails):
            raise ValidationError("Demo accounts need three different emails", code="DUPLICATE_DEMO_EMAIL")
        for email in emails.values():
            if await UserService.check_email_exists(db, email):
                raise ConflictError(f"Demo account {email} already exists", code="DEMO_ALREADY_SEEDED")

        owner_role, owner_first, owner_last = DEMO_STAFF[0]
        school, owner = await SchoolService.create_school_with_owner(
            db,
            school_name=DEMO_SCHOOL["name"],
            owner_data={
                "email": emails[owner_role],
                "password": request.password,
                "first_name": owner_first,
                "last_name": owner_last,
            },
            plan=SchoolPlan.PRO,
            school_email=DEMO_SCHOOL["email"],
            school_phone=DEMO_SCHOOL["phone"],
            created_by=actor.id if actor else None,
        )
        for field in ("address", "line_oa", "website", "business_hours"):
            setattr(school, field, DEMO_SCHOOL[field])
        school.is_verified = True

        for role, first_name, last_name in DEMO_STAFF[1:]:
            await UserService.create_user(
                db,
                email=emails[role],
                password=request.password,
                first_name=first_name,
                last_name=last_name,
                role=role,
                school_id=school.id,
                phone="0812345678",
                created_by=owner.id,
            )
        await db.commit()

        courses = []
        for name, category, description in DEMO_COURSES:
            courses.append(await CourseService.create_course(
                db, school.id, CourseCreate(name=name, category=category, description=description)
            ))

        packages: List[List] = []
        for course in courses:
            course_packages = []
            for order, (name, credits, price, months, popular, recommended) in enumerate(DEMO_PACKAGES, 1):
                course_packages.append(await PackageService.create_package(
                    db,
                    school.id,
                    PackageCreate(
                        name=name,
                        course_id=course.id,
                        applicable_course_ids=[course.id],
                        credits=credits,
                        price=price,
                        validity_type=ValidityType.MONTHS,
                        validity_value=months,
                        display_order=order,
                        popular=popular,
                        recommended=recommended,
                    ),
                ))
            packages.append(course_packages)

        students = [
            await StudentService.create_student(db, school.id, StudentCreate(**data))
            for data in DEMO_STUDENTS
        ]

        credits = []
        for i, student in enumerate(students):
            course_index = i % len(courses)
            package = packages[course_index][i % len(DEMO_PACKAGES)]
            credits.append(await CreditService.purchase(
                db,
                school.id,
                PurchaseRequest(
                    student_id=student.id,
                    package_id=package.id,
                    course_id=courses[course_index].id,
                    payment_method=PaymentMethod.CASH,
                ),
                sold_by=owner,
            ))

        result = {
            "school_id": school.id,
            "accounts": [{"role": role.value, "email": email} for role, email in emails.items()],
            "courses": len(courses),
            "packages": sum(len(p) for p in packages),
            "students": len(students),
            "credits": len(credits),
        }
        await SuperAdminService.write_log(
            db,
            "school.seed_demo",
            actor=actor,
            school_id=school.id,
            details={k: v for k, v in result.items() if k != "school_id"},
        )
        logger.info("Demo school seeded", extra={"school_id": str(school.id)})
        return result
