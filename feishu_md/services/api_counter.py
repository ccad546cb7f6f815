from __future__ import annotations

from typing import Literal

ApiCallKind = Literal["auth", "wiki", "doc", "blocks", "media"]

# 统计顺序即摘要输出顺序
API_CALL_KINDS: tuple[ApiCallKind, ...] = ("auth", "wiki", "doc", "blocks", "media")


class ApiCallCounter:
    """单次运行内的飞书 API 调用统计，由调用方注入各个服务。"""

    def __init__(self) -> None:
        self._stats: dict[str, int] = {kind: 0 for kind in API_CALL_KINDS}

    def increment(self, kind: ApiCallKind, count: int = 1) -> None:
        if kind not in self._stats:
            raise ValueError(f"未知的 API 类型: {kind}")
        self._stats[kind] += count

    @property
    def total(self) -> int:
        return sum(self._stats.values())

    def snapshot(self) -> dict[str, int]:
        return dict(self._stats)

    def format_summary(self) -> str:
        parts = [f"{kind}:{self._stats[kind]}" for kind in API_CALL_KINDS if self._stats[kind] > 0]
        return f"共 {self.total} 次 ({', '.join(parts)})"


__all__ = ["API_CALL_KINDS", "ApiCallCounter", "ApiCallKind"]
