"""
FastAPI 依赖注入模块

提供可复用的依赖项：数据库会话、当前用户、Stripe 网关、webhook 诊断日志。
测试中通过 app.dependency_overrides 替换。
"""
from collections.abc import Generator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError
from sqlmodel import Session

from marketplace.api.schemas import TokenPayload
from marketplace.core import security
from marketplace.core.config import settings
from marketplace.core.db import engine
from marketplace.models import User
from marketplace.services.stripe_gateway import StripeGateway
from marketplace.services.webhook_log import WebhookLogger

# 从 Authorization: Bearer <token> 中提取 token
reusable_oauth2 = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    """
    获取数据库会话

    使用 yield 确保会话在请求结束后自动关闭。
    """
    with Session(engine) as session:
        yield session


def get_payment_gateway() -> StripeGateway:
    """每个请求构造一个 Stripe 网关，不共享全局客户端"""
    return StripeGateway(
        api_key=settings.STRIPE_SECRET_KEY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        tolerance=settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS,
    )


def get_webhook_logger() -> WebhookLogger:
    return WebhookLogger(engine)


async def get_raw_body(request: Request) -> bytes:
    """
    原始请求体

    webhook 签名是对原始字节计算的，不能使用 FastAPI 解析后的 JSON。
    """
    return await request.body()


SessionDep = Annotated[Session, Depends(get_db)]
TokenDep = Annotated[HTTPAuthorizationCredentials, Depends(reusable_oauth2)]
GatewayDep = Annotated[StripeGateway, Depends(get_payment_gateway)]
WebhookLogDep = Annotated[WebhookLogger, Depends(get_webhook_logger)]
RawBodyDep = Annotated[bytes, Depends(get_raw_body)]


def get_current_user(session: SessionDep, token: TokenDep) -> User:
    """
    获取当前登录用户

    从 JWT token 中解析用户 ID 并查询数据库。

    Raises:
        HTTPException: token 无效、用户不存在时返回 401
    """
    try:
        payload = jwt.decode(
            token.credentials, settings.SECRET_KEY, algorithms=[security.ALGORITHM]
        )
        token_data = TokenPayload(**payload)
    except (InvalidTokenError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    if not token_data.sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    try:
        user_id = int(token_data.sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
