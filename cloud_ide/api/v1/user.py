from fastapi import APIRouter, Depends
from cloud_ide.models.user import User
from cloud_ide.schemas.user import UserResponse
from cloud_ide.api.v1.auth import get_current_user

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def get_user_profile(current_user: User = Depends(get_current_user)):
    """Profile of the signed-in user."""
    return current_user
