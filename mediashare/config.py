import mimetypes

# Configurations:

DEFAULT_PORT = 8000
MAX_PORT = 65535

# URL layout. The manifest builds file paths under CONTENT_PREFIX, and the
# static mount is served from the same prefix.
CONTENT_PREFIX = "/content"
FILES_ENDPOINT = "/api/files"

MEDIA_EXTS = {
    'image': {'.jpg', '.jpeg', '.png', '.gif', '.webp'},
    'video': {'.mp4', '.webm', '.mov', '.mkv'},
}

# QR code
QR_SCALE = 4  # pixels per module
QR_ERROR_LEVEL = "L"
QR_DATA_URI_PREFIX = "data:image/png;base64,"

# Server
POLL_INTERVAL = 0.5  # seconds between shutdown checks in the accept loop
HANDLER_TIMEOUT = 30  # seconds an idle client connection is kept open
LOCK_TIMEOUT = 5  # seconds
COPY_BUFFER_SIZE = 1024 * 64  # 64KB chunks

if not mimetypes.inited:
    mimetypes.init()
mimetypes.add_type('video/mp4', '.mp4')
mimetypes.add_type('video/x-matroska', '.mkv')
mimetypes.add_type('video/webm', '.webm')
mimetypes.add_type('video/quicktime', '.mov')
mimetypes.add_type('image/webp', '.webp')
