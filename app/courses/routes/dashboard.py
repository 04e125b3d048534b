from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser, require_admin, require_roles, require_student
from app.auth.models.user_profile import UserRole
from app.courses.schemas.dashboard import AdminStats, InstructorCourse, StudentCourse
from app.courses.services.dashboard_service import DashboardService
from app.db.session import get_db

router = APIRouter()


@router.get("/admin", response_model=AdminStats)
async def admin_dashboard(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> AdminStats:
    return DashboardService.admin_stats(db)


@router.get("/instructor", response_model=list[InstructorCourse])
async def instructor_dashboard(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.INSTRUCTOR)),
) -> list[InstructorCourse]:
    return DashboardService.instructor_courses(db, current_user.id)


@router.get("/student", response_model=list[StudentCourse])
async def student_dashboard(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_student),
) -> list[StudentCourse]:
    return DashboardService.student_courses(db, current_user.id)
