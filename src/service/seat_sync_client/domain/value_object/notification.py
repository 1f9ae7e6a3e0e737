from enum import StrEnum

import attrs


class NotificationSeverity(StrEnum):
    INFO = 'info'
    ERROR = 'error'


@attrs.define(frozen=True)
class Notification:
    """Transient, non-blocking message for the viewer"""

    message: str
    severity: NotificationSeverity = NotificationSeverity.INFO

    @classmethod
    def info(cls, message: str) -> 'Notification':
        return cls(message=message, severity=NotificationSeverity.INFO)

    @classmethod
    def error(cls, message: str) -> 'Notification':
        return cls(message=message, severity=NotificationSeverity.ERROR)
