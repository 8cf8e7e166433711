"""用户路由模块"""
from __future__ import annotations

from fastapi import APIRouter

from marketplace.api.deps import CurrentUser
from marketplace.api.schemas import ApiEnvelope, UserProfile
from marketplace.models import User

router = APIRouter(prefix="/user", tags=["user"])


def to_profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        stripe_account_id=user.stripe_account_id,
        stripe_account_setup_complete=user.stripe_account_setup_complete,
    )


@router.get("/profile", response_model=ApiEnvelope)
def profile(current_user: CurrentUser) -> ApiEnvelope:
    """
    获取当前登录用户的资料

    请求路径: GET /api/v1/user/profile
    """
    return ApiEnvelope(data=to_profile(current_user))
