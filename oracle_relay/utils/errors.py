from typing import Optional


class RelayError(Exception):
    """Base class for every error raised inside the relay pipeline."""


class MalformedTickError(RelayError):
    pass


class MalformedEventError(RelayError):
    pass


class DeliveryError(RelayError):
    """The consensus application connection is down or the send failed."""


class BroadcastError(RelayError):

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
