from fastapi import APIRouter, Depends

from mirai.api.deps import get_current_user
from mirai.models.user import User
from mirai.schemas.user import UserRead, UserSingleResponse

router = APIRouter()


@router.get("/me", response_model=UserSingleResponse)
def read_current_user(user: User = Depends(get_current_user)):
    """Return the local user for the signed-in identity, creating or relinking it first."""
    return {"status": 200, "message": "User returned successfully", "data": UserRead.model_validate(user)}
