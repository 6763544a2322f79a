"""Start/stop management for the media server.

A :class:`ServerManager` owns one :class:`SessionSlot`. At most one
:class:`ServerSession` occupies the slot at a time; ``start`` fills it and
``stop`` empties it, both under the slot's lock.
"""
import contextlib
import logging
import threading
from dataclasses import asdict, dataclass
from typing import Optional

from . import qr
from .config import DEFAULT_PORT, LOCK_TIMEOUT, MAX_PORT, POLL_INTERVAL
from .errors import (
    AddressResolutionError,
    AlreadyRunningError,
    BindError,
    EncodingError,
    MediaShareError,
)
from .page import INDEX_HTML
from .server import ThreadedHTTPServer, get_local_ip

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerInfo:
    ip: str
    port: int
    qr_code: str

    @property
    def url(self):
        return f"http://{self.ip}:{self.port}"

    def to_dict(self):
        return asdict(self)


class CancelHandle:
    """One-shot stop signal for a running server.

    Only the first ``fire()`` shuts the server down; later calls return
    ``False`` and do nothing.
    """

    def __init__(self, httpd):
        self._httpd = httpd
        self._lock = threading.Lock()
        self._fired = False

    @property
    def fired(self):
        return self._fired

    def fire(self):
        with self._lock:
            if self._fired:
                return False
            self._fired = True
        # Returns once the accept loop has stopped, at most one poll interval
        self._httpd.shutdown()
        return True


class ServerSession:
    def __init__(self, root_directory, httpd):
        self.root_directory = root_directory
        self.httpd = httpd
        self.port = httpd.port
        self.cancel = CancelHandle(httpd)
        self.failure: Optional[BaseException] = None
        self.thread = threading.Thread(
            target=self._serve, name=f"mediashare-{self.port}", daemon=True
        )

    def start(self):
        self.thread.start()

    def _serve(self):
        try:
            self.httpd.serve_forever(poll_interval=POLL_INTERVAL)
        except Exception as e:
            self.failure = e
            logger.exception("Server on port %d crashed", self.port)
        finally:
            # Waits for in-flight requests, then releases the socket
            self.httpd.server_close()
            logger.info("Server on port %d stopped", self.port)

    @property
    def alive(self):
        return self.thread.is_alive()

    def join(self, timeout=None):
        self.thread.join(timeout)
        return not self.thread.is_alive()


class SessionSlot:
    """Holds the active session, if any, behind a single lock."""

    def __init__(self, lock_timeout=LOCK_TIMEOUT):
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout
        self.session: Optional[ServerSession] = None

    @contextlib.contextmanager
    def locked(self):
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise MediaShareError("Timed out waiting for the server state lock")
        try:
            yield self
        finally:
            self._lock.release()


class ServerManager:
    def __init__(self, slot=None, resolve_address=get_local_ip, index_html=INDEX_HTML, host="0.0.0.0"):
        self.slot = slot if slot is not None else SessionSlot()
        self.resolve_address = resolve_address
        self.index_html = index_html
        self.host = host

    @property
    def session(self) -> Optional[ServerSession]:
        return self.slot.session

    @property
    def is_running(self):
        return self.slot.session is not None

    def start(self, path, port=DEFAULT_PORT) -> ServerInfo:
        """Serve ``path`` on ``port`` and return the address and QR code.

        Raises AlreadyRunningError if a session is active and BindError if the
        port cannot be bound; in both cases nothing changes. A failure to
        resolve the address or build the QR code is raised after the server
        has started, and the server keeps running until ``stop``.
        """
        with self.slot.locked():
            if self.slot.session is not None:
                raise AlreadyRunningError()
            if not 0 <= port <= MAX_PORT:
                logger.error("Port %s is out of range", port)
                raise BindError(port, f"port must be 0-{MAX_PORT}")
            try:
                httpd = ThreadedHTTPServer((self.host, port), path, self.index_html)
            except (OSError, OverflowError) as e:
                logger.error("Could not bind port %s: %s", port, e)
                raise BindError(port, e) from e
            session = ServerSession(path, httpd)
            self.slot.session = session
            session.start()

        port = session.port
        logger.info("Serving %s on port %d", path, port)

        try:
            ip = self.resolve_address()
        except OSError as e:
            logger.warning("Server is running but the local address is unknown: %s", e)
            raise AddressResolutionError(port, e) from e

        url = f"http://{ip}:{port}"
        try:
            qr_code = qr.encode(url)
        except EncodingError as e:
            logger.warning("Server is running but the QR code failed: %s", e)
            e.port = port
            raise

        return ServerInfo(ip=ip, port=port, qr_code=qr_code)

    def stop(self, wait=False, timeout=None):
        """Stop the running server. Returns False if none was running.

        With ``wait`` the call also blocks until in-flight requests are done.
        An idle client connection can hold that wait for up to
        ``config.HANDLER_TIMEOUT`` seconds unless ``timeout`` is shorter.
        """
        with self.slot.locked():
            session = self.slot.session
            self.slot.session = None

        if session is None:
            return False

        session.cancel.fire()
        logger.info("Stop requested for server on port %d", session.port)
        if wait:
            session.join(timeout)
        return True


_default_manager = ServerManager()


def start_server(path, port=DEFAULT_PORT) -> ServerInfo:
    return _default_manager.start(path, port)


def stop_server():
    _default_manager.stop()
