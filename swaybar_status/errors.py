"""Error types for the status stream."""


class StatusStreamError(Exception):
    """Base error for status stream failures."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class OutputFailure(StatusStreamError):
    """Writing or flushing the output stream failed.

    Fatal: the bar host is gone and there is nothing left to write to.
    """

    def __init__(self, message: str = ""):
        super().__init__(message or "Failed to write to the status output stream.")


class MalformedEvent(StatusStreamError):
    """Input did not decode into a valid click event."""

    def __init__(self, message: str = "", payload: str = ""):
        self.payload = payload
        super().__init__(message or "Malformed click event.")


class InputClosed(StatusStreamError):
    """The host closed the input stream; no further click events will arrive."""

    def __init__(self, message: str = ""):
        super().__init__(message or "Click event input stream closed.")
