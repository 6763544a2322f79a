class MediaShareError(Exception):
    """Base class for every error raised by mediashare."""


class AlreadyRunningError(MediaShareError):
    def __init__(self):
        super().__init__("Server is already running")


class BindError(MediaShareError):
    """The listening socket could not be bound (port in use, no privilege)."""

    def __init__(self, port, cause):
        super().__init__(f"Could not bind port {port}: {cause}")
        self.port = port


class AddressResolutionError(MediaShareError):
    """Raised after a successful bind; the server keeps serving."""

    def __init__(self, port, cause):
        super().__init__(f"Could not resolve local network address: {cause}")
        self.port = port


class EncodingError(MediaShareError):
    """The QR payload could not be encoded.

    When raised from ``ServerManager.start`` the server is already running
    and ``port`` holds the bound port.
    """

    def __init__(self, message, port=None):
        super().__init__(message)
        self.port = port
