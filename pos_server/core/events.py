"""
进程内事件总线
用于在菜单导入完成后通知其他视图/订阅方重新读取菜单
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, DefaultDict, Dict, List

logger = logging.getLogger(__name__)

MENU_IMPORTED = "menu-imported"


@dataclass(frozen=True)
class Event:
    topic: str
    payload: Dict[str, Any]
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))


EventHandler = Callable[[Event], None]


class EventBus:
    """同步事件总线，订阅方按注册顺序调用"""

    def __init__(self) -> None:
        self._subscribers: DefaultDict[str, List[EventHandler]] = defaultdict(list)

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        self._subscribers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        if handler in self._subscribers.get(topic, []):
            self._subscribers[topic].remove(handler)

    def publish(self, topic: str, **payload: Any) -> Event:
        event = Event(topic=topic, payload=payload)
        for handler in list(self._subscribers.get(topic, [])):
            try:
                handler(event)
            except Exception:
                # 通知是尽力而为的，某个订阅方失败不影响发布方
                logger.exception("Event handler failed for %s", topic)
        return event


# 全局事件总线
event_bus = EventBus()
