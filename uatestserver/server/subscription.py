"""In-server subscription that logs data changes of watched variables."""

from typing import Any

from ..logging import log_info


class DataChangeLogger:
    """Subscription handler for asyncua, logging every data change."""

    def __init__(self):
        self.notifications = 0

    def datachange_notification(self, node: Any, val: Any, data: Any) -> None:
        self.notifications += 1
        log_info(f"Received DataChange event for Node {node}: {val}")

    def event_notification(self, event: Any) -> None:
        log_info(f"Received event: {event}")
