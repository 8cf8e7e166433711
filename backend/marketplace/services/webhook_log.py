"""
Webhook 诊断日志

把 webhook 处理的每个阶段追加写入 webhook_logs 表，方便排查某次推送停在哪一步。

写日志使用独立的数据库会话：业务事务回滚时日志仍然保留。
写日志失败只记录到应用日志，不会向调用方抛出，不能影响订单创建。
"""
import logging
from typing import Any

from sqlalchemy import Engine
from sqlmodel import Session

from marketplace.models import WebhookLog

logger = logging.getLogger(__name__)


class WebhookStage:
    """webhook 处理阶段名称"""
    received = "received"
    signature_verified = "signature_verified"
    ignored = "ignored"
    metadata_extracted = "metadata_extracted"
    offer_resolved = "offer_resolved"
    order_inserted = "order_inserted"
    duplicate = "duplicate"
    acknowledged = "acknowledged"
    failed = "failed"


class WebhookLogger:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def log(self, stage: str, data: dict[str, Any] | None = None) -> None:
        """追加一条阶段记录，任何异常都只写应用日志"""
        logger.info(f"webhook stage={stage} data={data}")
        try:
            with Session(self._engine) as session:
                session.add(WebhookLog(stage=stage, data=data))
                session.commit()
        except Exception:
            logger.exception(f"Failed to persist webhook log for stage {stage}")
