from fastapi import APIRouter, Depends, HTTPException, status

from clinic.middlewares.roles import ADMIN_ONLY, STAFF, CurrentUser, require_roles
from clinic.routers.errors import http_error
from clinic.schemas.users import Role, UserCreate, UserResponse, UserUpdate
from clinic.services.sessions import session_store
from clinic.services.users import UserConflictError, UserNotFoundError, user_store

router = APIRouter(tags=["users"])


@router.get("/admin/users", response_model=list[UserResponse])
def list_users(
    role: Role | None = None, _: CurrentUser = Depends(require_roles(*ADMIN_ONLY))
) -> list[UserResponse]:
    return [UserResponse.model_validate(user) for user in user_store.list_users(role)]


@router.post(
    "/admin/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
def create_user(
    payload: UserCreate, _: CurrentUser = Depends(require_roles(*ADMIN_ONLY))
) -> UserResponse:
    try:
        user = user_store.create_user(payload)
    except UserConflictError as exc:
        raise http_error(exc) from exc
    return UserResponse.model_validate(user)


@router.patch("/admin/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdate,
    _: CurrentUser = Depends(require_roles(*ADMIN_ONLY)),
) -> UserResponse:
    try:
        user = user_store.update_user(user_id, payload)
    except (UserConflictError, UserNotFoundError) as exc:
        raise http_error(exc) from exc
    return UserResponse.model_validate(user)


@router.delete("/admin/users/{user_id}")
def delete_user(
    user_id: int, current: CurrentUser = Depends(require_roles(*ADMIN_ONLY))
) -> dict:
    if user_id == current.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Kendi hesabınızı silemezsiniz",
        )
    if user_store.get_user(user_id) is None:
        raise http_error(UserNotFoundError("User not found"))
    session_store.close_all(user_id)
    try:
        user_store.delete_user(user_id)
    except UserNotFoundError as exc:
        raise http_error(exc) from exc
    return {"message": "Kullanıcı silindi"}


@router.get("/users/therapists", response_model=list[UserResponse])
def list_therapist_users(
    _: CurrentUser = Depends(require_roles(*STAFF)),
) -> list[UserResponse]:
    return [
        UserResponse.model_validate(user)
        for user in user_store.list_users(Role.THERAPIST)
    ]
