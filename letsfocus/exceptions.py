"""Exception hierarchy shared by the LetsFocus core and service layer."""


class LetsFocusError(Exception):
    """Base class for all LetsFocus errors."""


class InvalidStateError(LetsFocusError):
    """Raised when an operation is not legal in the session's current state."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while session is {state}")


class TickSchedulerError(LetsFocusError):
    """Raised when the countdown tick scheduler cannot be started."""


class AudioOutputError(LetsFocusError):
    """Raised by audio outputs when a playback command cannot be delivered."""
