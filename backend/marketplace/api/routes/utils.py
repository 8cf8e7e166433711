"""
工具路由模块

健康检查：同时探测数据库连接，负载均衡器据此摘除不可用实例。
"""
from fastapi import APIRouter
from sqlmodel import select

from marketplace.api.deps import SessionDep

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/health-check/")
def health_check(session: SessionDep) -> bool:
    """
    请求路径: GET /api/v1/utils/health-check/

    数据库不可用时查询抛错，返回 500。
    """
    session.exec(select(1))
    return True
