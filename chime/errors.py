class ChimeError(Exception):
    """Base class for alarm clock errors."""


class ValidationError(ChimeError, ValueError):
    pass


class NotFoundError(ChimeError, LookupError):
    def __init__(self, alarm_id) -> None:
        super().__init__(f"Alarm {alarm_id} not found")
        self.alarm_id = alarm_id


class PersistenceError(ChimeError):
    pass
