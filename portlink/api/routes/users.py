from fastapi import APIRouter, Depends, status

from portlink.api.dependencies import get_user_service, get_current_user_id
from portlink.api.middleware.rate_limit import rate_limit
from portlink.api.schemas.users import UserCreate, UserResponse, ProfileUpdate
from portlink.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("default:write"))],
)
async def register_user(
    data: UserCreate,
    users: UserService = Depends(get_user_service),
):
    fields = data.model_dump(mode="json")
    return await users.register(**fields)


@router.patch("/me/profile", response_model=UserResponse)
async def update_my_profile(
    data: ProfileUpdate,
    user_id: int = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
):
    return await users.update_profile(user_id, data.model_dump(mode="json", exclude_unset=True))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    users: UserService = Depends(get_user_service),
):
    return await users.get(user_id)
