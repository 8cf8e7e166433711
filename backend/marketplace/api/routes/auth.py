"""
认证路由模块

用户身份由外部登录服务提供，这里用 token_identifier 换取本服务的 JWT。
"""
from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter

from marketplace import crud
from marketplace.api.deps import SessionDep
from marketplace.api.routes.user import to_profile
from marketplace.api.schemas import ApiEnvelope, AuthLoginData, AuthLoginRequest
from marketplace.core import security
from marketplace.core.config import settings

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=ApiEnvelope)
def login(session: SessionDep, body: AuthLoginRequest) -> ApiEnvelope:
    """
    用户登录接口

    首次登录自动创建用户，返回 JWT token 和用户信息。

    请求路径: POST /api/v1/auth/login
    """
    user = crud.get_or_create_user_by_token_identifier(
        session=session,
        token_identifier=body.token_identifier,
        username=body.username,
        full_name=body.full_name,
    )

    access_token_expires = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    token = security.create_access_token(user.id, expires_delta=access_token_expires)
    expires_in = int(access_token_expires.total_seconds())

    data = AuthLoginData(access_token=token, expires_in=expires_in, user=to_profile(user))
    return ApiEnvelope(data=data)
