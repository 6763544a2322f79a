"""Share a folder's images and videos over the local network."""
from .errors import (
    AddressResolutionError,
    AlreadyRunningError,
    BindError,
    EncodingError,
    MediaShareError,
)
from .lifecycle import (
    CancelHandle,
    ServerInfo,
    ServerManager,
    ServerSession,
    SessionSlot,
    start_server,
    stop_server,
)
from .media import FileEntry, classify, list_media
from .qr import encode as encode_qr

__version__ = "0.1.0"
