import datetime
import email.utils
import functools
import http.server
import io
import json
import logging
import os
import re
import socket
import socketserver
import urllib.parse
from http import HTTPStatus

from .config import CONTENT_PREFIX, COPY_BUFFER_SIZE, FILES_ENDPOINT, HANDLER_TIMEOUT
from .media import list_media

logger = logging.getLogger(__name__)

RANGE_RE = re.compile(r'bytes=(\d*)-(\d*)$')


def parse_range(header, file_size):
    """Return ``(first, last)`` for a single byte range, or ``None``.

    ``None`` means the range is malformed or not satisfiable for a file of
    ``file_size`` bytes. Multi-range requests are not supported.
    """
    match = RANGE_RE.match(header.strip())
    if not match:
        return None
    first, last = match.group(1), match.group(2)

    if not first:
        # Suffix range: the last N bytes
        if not last:
            return None
        length = int(last)
        if length == 0 or file_size == 0:
            return None
        return max(file_size - length, 0), file_size - 1

    first = int(first)
    if first >= file_size:
        return None
    last = int(last) if last else file_size - 1
    if last < first:
        return None
    return first, min(last, file_size - 1)


# For multiple users at once
class ThreadedHTTPServer(socketserver.ThreadingMixIn, socketserver.TCPServer):
    # Handler threads are joined in server_close() so in-flight responses
    # finish before the session ends.
    daemon_threads = False
    block_on_close = True
    allow_reuse_address = True

    def __init__(self, server_address, root_directory, index_html):
        self.root_directory = os.fspath(root_directory)
        self.index_html = index_html
        handler = functools.partial(MediaHandler, directory=self.root_directory)
        super().__init__(server_address, handler)

    @property
    def port(self):
        return self.server_address[1]


class MediaHandler(http.server.SimpleHTTPRequestHandler):
    # Idle connections must not block shutdown forever
    timeout = HANDLER_TIMEOUT

    def log_message(self, format, *args):
        logger.info("%s - %s", self.client_address[0], format % args)

    def end_headers(self):
        self.send_header("Access-Control-Allow-Origin", "*")
        super().end_headers()

    def do_OPTIONS(self):
        self.send_response(HTTPStatus.NO_CONTENT)
        self.send_header("Access-Control-Allow-Methods", "GET, HEAD, OPTIONS")
        requested = self.headers.get("Access-Control-Request-Headers")
        self.send_header("Access-Control-Allow-Headers", requested or "*")
        self.send_header("Access-Control-Max-Age", "86400")
        self.send_header("Content-Length", "0")
        self.end_headers()

    def send_head(self):
        self.remaining = None
        path = urllib.parse.urlsplit(self.path).path

        if path in ("/", "/index.html"):
            return self.send_bytes(self.server.index_html.encode("utf-8"), "text/html; charset=utf-8")
        if path == FILES_ENDPOINT:
            return self.send_manifest()
        if path.startswith(CONTENT_PREFIX + "/"):
            return self.send_content()

        self.send_error(HTTPStatus.NOT_FOUND, "Not found")
        return None

    def send_bytes(self, body, ctype):
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-type", ctype)
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        return io.BytesIO(body)

    def send_manifest(self):
        files = [entry.to_dict() for entry in list_media(self.server.root_directory)]
        body = json.dumps(files).encode("utf-8")
        return self.send_bytes(body, "application/json")

    def translate_path(self, path):
        # Strip the mount prefix; the base class maps the rest onto
        # self.directory and drops '..' segments.
        if path.startswith(CONTENT_PREFIX + "/"):
            path = path[len(CONTENT_PREFIX):]
        return super().translate_path(path)

    def send_content(self):
        path = self.translate_path(self.path)
        if os.path.isdir(path):
            self.send_error(HTTPStatus.NOT_FOUND, "File not found")
            return None

        ctype = self.guess_type(path)
        try:
            f = open(path, 'rb')
        except OSError:
            self.send_error(HTTPStatus.NOT_FOUND, "File not found")
            return None

        try:
            fs = os.fstat(f.fileno())
            if self.not_modified(fs.st_mtime):
                self.send_response(HTTPStatus.NOT_MODIFIED)
                self.end_headers()
                f.close()
                return None

            file_size = fs.st_size
            if "Range" in self.headers:
                byte_range = parse_range(self.headers["Range"], file_size)
                if byte_range is None:
                    self.send_response(HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE)
                    self.send_header("Content-Range", f"bytes */{file_size}")
                    self.send_header("Content-Length", "0")
                    self.end_headers()
                    f.close()
                    return None
                first, last = byte_range
                length = last - first + 1
                self.send_response(HTTPStatus.PARTIAL_CONTENT)
                self.send_header("Content-Range", f"bytes {first}-{last}/{file_size}")
                f.seek(first)
                self.remaining = length
            else:
                length = file_size
                self.send_response(HTTPStatus.OK)

            self.send_header("Content-type", ctype)
            self.send_header("Content-Length", str(length))
            self.send_header("Last-Modified", self.date_time_string(fs.st_mtime))
            self.send_header("Accept-Ranges", "bytes")
            self.end_headers()
            return f
        except Exception:
            f.close()
            raise

    def not_modified(self, mtime):
        if "If-Modified-Since" not in self.headers or "If-None-Match" in self.headers:
            return False
        try:
            since = email.utils.parsedate_to_datetime(self.headers["If-Modified-Since"])
        except (TypeError, IndexError, OverflowError, ValueError):
            return False
        if since.tzinfo is None:
            since = since.replace(tzinfo=datetime.timezone.utc)
        last_modified = datetime.datetime.fromtimestamp(mtime, datetime.timezone.utc)
        return last_modified.replace(microsecond=0) <= since

    def copyfile(self, source, outputfile):
        remaining = self.remaining
        try:
            while remaining is None or remaining > 0:
                size = COPY_BUFFER_SIZE if remaining is None else min(COPY_BUFFER_SIZE, remaining)
                data = source.read(size)
                if not data:
                    break
                outputfile.write(data)
                if remaining is not None:
                    remaining -= len(data)
        except (ConnectionResetError, BrokenPipeError):
            logger.debug("Client %s disconnected", self.client_address[0])


def get_local_ip():
    """Return this machine's address on the local network.

    Raises OSError when no address can be found.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # No packet is sent; this only selects the outgoing interface
        s.connect(("8.8.8.8", 80))
        return s.getsockname()[0]
    except OSError:
        return socket.gethostbyname(socket.gethostname())
    finally:
        s.close()
