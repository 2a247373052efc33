from __future__ import annotations

import logging
from typing import Any

from booking_ops.application.ports.notifier import NotifierPort


class LogNotifier(NotifierPort):
    """Records notifications in the log; delivery belongs to the email/SMS service."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, dict[str, Any]]] = []
        self._logger = logging.getLogger(__name__)

    def notify(self, recipient: str, template: str, data: dict[str, Any]) -> None:
        self.sent.append((recipient, template, dict(data)))
        self._logger.info(
            "Notification queued", extra={"recipient": recipient, "template": template, "booking_id": data.get("booking_id")}
        )
