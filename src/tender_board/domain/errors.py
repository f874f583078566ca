"""Error taxonomy for project board API calls."""


class ApiError(Exception):
    """Base error for a failed round trip to the project board API."""


class TransportError(ApiError):
    """The request never produced an HTTP response (network, timeout)."""


class ServerError(ApiError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, payload: object) -> None:
        super().__init__(f"Server responded with status {status_code}")
        self.status_code = status_code
        self.payload = payload


class DecodeError(ApiError):
    """The response payload did not have the expected shape."""
