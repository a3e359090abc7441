# storefront/routes/users.py

from fastapi import APIRouter, Depends

from storefront.dependencies import get_current_account, get_user_service
from storefront.errors import ValidationError
from storefront.models import Account
from storefront.schemas import ChangePasswordRequest, ProfileUpdateRequest
from storefront.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile")
def get_profile(
    account: Account = Depends(get_current_account),
    users: UserService = Depends(get_user_service),
):
    return {"success": True, "data": users.get_profile(account.id)}


@router.put("/profile")
def update_profile(
    body: ProfileUpdateRequest,
    account: Account = Depends(get_current_account),
    users: UserService = Depends(get_user_service),
):
    # The email is the login identity and never changes
    if "email" in (body.model_extra or {}):
        raise ValidationError("Email updates are not supported")

    profile = users.update_profile(
        account.id,
        full_name=body.full_name,
        phone_number=body.phone_number,
        profile_picture=body.profile_picture,
    )
    return {"success": True, "message": "Profile updated successfully", "data": profile}


@router.put("/change-password")
def change_password(
    body: ChangePasswordRequest,
    account: Account = Depends(get_current_account),
    users: UserService = Depends(get_user_service),
):
    users.change_password(account.id, body.current_password, body.new_password)
    return {"success": True, "message": "Password changed successfully"}
