"""User-facing notices emitted once an admin action settles."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

logger = logging.getLogger(__name__)

NoticeLevel = Literal["success", "error", "info"]


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str
    kind: str | None = None
    context: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class NotificationCenter:
    """Keeps a bounded history of notices for the dashboard feed."""

    def __init__(self, *, history: int = 50) -> None:
        self._notices: deque[Notice] = deque(maxlen=history)

    async def push(self, notice: Notice) -> Notice:
        self._notices.append(notice)
        log = logger.error if notice.level == "error" else logger.info
        log("Notice [%s] %s kind=%s context=%s", notice.level, notice.message, notice.kind, notice.context)
        return notice

    async def success(self, message: str, **context: Any) -> Notice:
        return await self.push(Notice(level="success", message=message, context=context))

    async def info(self, message: str, **context: Any) -> Notice:
        return await self.push(Notice(level="info", message=message, context=context))

    async def error(self, message: str, kind: str | None = None, **context: Any) -> Notice:
        return await self.push(Notice(level="error", message=message, kind=kind, context=context))

    def recent(self, limit: int | None = None) -> list[Notice]:
        notices = list(self._notices)
        if limit is not None:
            notices = notices[-limit:] if limit > 0 else []
        return notices

    def clear(self) -> None:
        self._notices.clear()


_notification_center: NotificationCenter | None = None


def get_notification_center() -> NotificationCenter:
    """Get the process-wide notification center."""
    global _notification_center
    if _notification_center is None:
        from .config import get_settings

        _notification_center = NotificationCenter(history=get_settings().notification_history)
    return _notification_center
