"""
主键 ID 生成器

所有表的主键都使用 64 位 Snowflake ID，由应用侧生成，不依赖数据库自增：
订单、报价等记录在写入前就有确定的 ID，可以直接写进日志。

ID 结构：
- 41 位：距 _EPOCH_MS 的毫秒数
- 10 位：节点 ID（SNOWFLAKE_NODE_ID，0-1023）
- 12 位：同一毫秒内的序列号
"""
from __future__ import annotations

import threading
import time

from marketplace.core.config import settings

# 2024-01-01T00:00:00Z
_EPOCH_MS = 1704067200000

_NODE_BITS = 10
_SEQ_BITS = 12
_MAX_NODE = (1 << _NODE_BITS) - 1
_SEQ_MASK = (1 << _SEQ_BITS) - 1


class Snowflake:
    """线程安全的 Snowflake ID 生成器"""

    # 时钟回拨超过这个毫秒数就拒绝生成，避免 ID 重复
    max_backwards_ms = 5000

    def __init__(self, *, node_id: int) -> None:
        if not (0 <= node_id <= _MAX_NODE):
            raise ValueError(f"SNOWFLAKE_NODE_ID must be in [0, {_MAX_NODE}]")
        self._node_id = node_id
        self._lock = threading.Lock()
        self._last_ts = -1
        self._seq = 0

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)

    @classmethod
    def _wait_until(cls, target_ms: int) -> int:
        ts = cls._now_ms()
        while ts < target_ms:
            time.sleep(0.001)
            ts = cls._now_ms()
        return ts

    def next_id(self) -> int:
        """
        生成下一个 ID

        Raises:
            RuntimeError: 时钟回拨超过 max_backwards_ms
        """
        with self._lock:
            ts = self._now_ms()
            if ts < self._last_ts:
                drift = self._last_ts - ts
                if drift > self.max_backwards_ms:
                    raise RuntimeError(
                        f"Clock moved backwards by {drift}ms. "
                        "Refusing to generate IDs to prevent duplicates."
                    )
                ts = self._wait_until(self._last_ts)

            if ts == self._last_ts:
                self._seq = (self._seq + 1) & _SEQ_MASK
                if self._seq == 0:
                    # 本毫秒序列号用完
                    ts = self._wait_until(self._last_ts + 1)
            else:
                self._seq = 0

            self._last_ts = ts
            return ((ts - _EPOCH_MS) << (_NODE_BITS + _SEQ_BITS)) | (
                self._node_id << _SEQ_BITS
            ) | self._seq


_GENERATOR: Snowflake | None = None


def _get_generator() -> Snowflake:
    global _GENERATOR
    if _GENERATOR is None:
        _GENERATOR = Snowflake(node_id=settings.SNOWFLAKE_NODE_ID)
    return _GENERATOR


def generate_id() -> int:
    """生成主键 ID，作为 SQLModel 字段的 default_factory 使用"""
    return _get_generator().next_id()
