"""Errors raised by the earnings ledger."""


class EarningsError(Exception):
    """Base exception for ledger faults that should reach the request handler."""

    def __init__(self, code: str, message: str, retryable: bool = False):
        self.code = code
        self.message = message
        self.retryable = retryable
        super().__init__(message)


class EventNotFoundError(EarningsError):
    """The referenced event has no record. Indicates a data-integrity bug."""

    def __init__(self, event_id: str):
        super().__init__(
            code="EVENT_NOT_FOUND",
            message=f"Event {event_id} not found",
            retryable=False,
        )
        self.event_id = event_id
