from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser, require_admin
from app.auth.models.user_profile import UserRole
from app.auth.repository import ProfileRepository
from app.auth.schemas.user import (
    CreateUserRequest,
    CreateUserResponse,
    DeleteUserRequest,
    DeleteUserResponse,
    UpdateUserRequest,
    UserResponse,
)
from app.auth.services.identity_provider import IdentityProvider, get_identity_provider
from app.auth.services.user_service import UserService
from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.schemas import PaginatedResponse, paginated_response
from app.db.session import get_db

router = APIRouter()


@router.post("/create", response_model=CreateUserResponse, status_code=status.HTTP_200_OK)
async def create_user(
    request: CreateUserRequest,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
    current_user: CurrentUser = Depends(require_admin),
) -> CreateUserResponse:
    """Create an identity provider account and its profile (admin only)."""
    profile = await UserService.create_user(
        db,
        provider,
        email=request.email,
        password=request.password,
        full_name=request.full_name,
        role=request.role,
    )
    return CreateUserResponse(user=UserResponse.model_validate(profile))


@router.post("/delete", response_model=DeleteUserResponse)
async def delete_user(
    request: DeleteUserRequest,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
    current_user: CurrentUser = Depends(require_admin),
) -> DeleteUserResponse:
    """Delete an identity provider account (admin only)."""
    await UserService.delete_user(
        db,
        provider,
        user_id=request.user_id,
        current_user=current_user,
        delete_profile=request.delete_profile,
    )
    return DeleteUserResponse()


@router.get("", response_model=PaginatedResponse[UserResponse])
async def list_users(
    role: UserRole | None = Query(None, description="Filter by role"),
    active: bool | None = Query(None, description="Filter by active status"),
    search: str | None = Query(None, description="Search by name or email"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> PaginatedResponse[UserResponse]:
    rows, total = ProfileRepository(db).search(
        role=role, active=active, search=search, skip=(page - 1) * limit, limit=limit
    )
    return paginated_response(
        [UserResponse.model_validate(row) for row in rows], total=total, page=page, limit=limit
    )


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    request: UpdateUserRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> UserResponse:
    """Rename or (de)activate a user. Roles cannot be changed."""
    profile = UserService.update_user(
        db, user_id, full_name=request.full_name, active=request.active
    )
    return UserResponse.model_validate(profile)
