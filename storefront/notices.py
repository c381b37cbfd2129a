"""
User-facing notices ("toasts") raised by business rules in the stores.
"""

import logging
from collections import namedtuple
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

Notice = namedtuple("Notice", ["level", "message"])

LEVELS = ("info", "success", "warning", "error")


class Notifier:
    """
    Collects notices for the presentation layer to display and drain.
    An optional listener is called for each notice as it is raised.
    """

    def __init__(self, listener: Optional[Callable[[Notice], None]] = None):
        self.listener = listener
        self.notices: List[Notice] = []

    def notify(self, level: str, message: str) -> Notice:
        if level not in LEVELS:
            raise ValueError(f"Unknown notice level: {level}")
        notice = Notice(level, message)
        self.notices.append(notice)
        logger.debug("notice [%s] %s", level, message)
        if self.listener:
            self.listener(notice)
        return notice

    def info(self, message: str) -> Notice:
        return self.notify("info", message)

    def success(self, message: str) -> Notice:
        return self.notify("success", message)

    def warning(self, message: str) -> Notice:
        return self.notify("warning", message)

    def error(self, message: str) -> Notice:
        return self.notify("error", message)

    def drain(self) -> List[Notice]:
        drained, self.notices = self.notices, []
        return drained
