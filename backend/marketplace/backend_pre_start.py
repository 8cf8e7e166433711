"""
应用启动前检查脚本

在应用启动前：
1. 等待数据库可连接（Docker Compose 中数据库容器可能还在初始化）
2. 检查 Stripe 配置是否像真实的密钥

Stripe 密钥缺失时导入 settings 就会失败，脚本直接以非零状态退出。
"""
import logging

from sqlalchemy import Engine
from sqlmodel import Session, select
from tenacity import (
    after_log,
    before_log,
    retry,
    stop_after_attempt,
    wait_fixed,
)

from marketplace.core.config import Settings, settings
from marketplace.core.db import engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

max_tries = 60 * 5  # 最多等待 5 分钟
wait_seconds = 1


@retry(
    stop=stop_after_attempt(max_tries),
    wait=wait_fixed(wait_seconds),
    before=before_log(logger, logging.INFO),
    after=after_log(logger, logging.WARN),
)
def init(db_engine: Engine) -> None:
    """
    执行 select(1) 验证数据库可用，失败时由 tenacity 重试
    """
    try:
        with Session(db_engine) as session:
            session.exec(select(1))
    except Exception as e:
        logger.error(e)
        raise e


def check_stripe_config(cfg: Settings) -> list[str]:
    """
    返回 Stripe 配置的可疑项，只告警不阻止启动

    生产环境使用测试密钥、或者 webhook 密钥格式不对，通常是部署配置写错了。
    """
    problems: list[str] = []
    if not cfg.STRIPE_SECRET_KEY.startswith(("sk_", "rk_")):
        problems.append("STRIPE_SECRET_KEY does not look like a Stripe secret key")
    if not cfg.STRIPE_WEBHOOK_SECRET.startswith("whsec_"):
        problems.append("STRIPE_WEBHOOK_SECRET does not look like a webhook signing secret")
    if cfg.ENVIRONMENT == "production" and cfg.STRIPE_SECRET_KEY.startswith("sk_test_"):
        problems.append("STRIPE_SECRET_KEY is a test-mode key in production")
    for problem in problems:
        logger.warning(problem)
    return problems


def main() -> None:
    logger.info("Initializing service")
    check_stripe_config(settings)
    init(engine)
    logger.info("Service finished initializing")


if __name__ == "__main__":  # pragma: no cover
    main()
