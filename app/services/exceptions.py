"""Exceptions raised by the chat pipeline."""


class ChatServiceError(Exception):
    """Base class for chat pipeline failures."""


class UpstreamError(ChatServiceError):
    """The upstream model API answered with a non-success status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"API Error: {status_code}")


class UpstreamConnectionError(ChatServiceError):
    """The upstream model API could not be reached or the connection broke."""
