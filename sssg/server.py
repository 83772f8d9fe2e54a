"""Preview server for sssg.

Serves the built htdocs tree over HTTP for local preview. Every request goes
through the same steps:

1. Sanitize: each ``..`` in the request path becomes ``_`` before the
   filesystem is touched, so the path can never climb out of htdocs.
2. Resolve: source documents (``*.src``) are never served, and paths ending
   in ``/`` get the index file appended.
3. Serve: the file is read in one go and returned with a 200, or a 404 with
   a short diagnostic when it cannot be read.

Each request produces exactly one log line. Requests are handled on their
own thread and share no mutable state.

Key classes:
- PreviewServer: Owns the listening socket and the serve loop.
- _PreviewHandler: Request handler implementing the steps above.
"""

from __future__ import annotations

import logging
import mimetypes
import re
import sys
import threading
from datetime import datetime
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import unquote

from . import __version__
from .sources import MARKER_SUFFIX

logger = logging.getLogger(__name__)

SANITISE_URL_RE = re.compile(r"[.]{2}")

DEFAULT_INDEX_FILE = "index.html"


class ResponseError(Exception):
    """Sending a response to the client failed. Stops the server."""


def sanitize_path(raw: str) -> str:
    """Neutralize parent-directory sequences in a request path.

    This is a textual rewrite, not path normalization: every run of two
    dots is replaced with ``_``.

    Args:
        raw: Decoded request path.

    Returns:
        The sanitized path.
    """
    return SANITISE_URL_RE.sub("_", raw)


def request_path(target: str) -> str:
    """Extract the decoded path from a request target.

    The query string and fragment are dropped, then percent-escapes are
    decoded so that encoded dots are sanitized like literal ones.

    Args:
        target: The request target from the request line.

    Returns:
        Decoded path component.
    """
    path = target.split("?", 1)[0].split("#", 1)[0]
    return unquote(path, errors="replace")


def resolve_request(
    htdocs: Path, sanitized: str, index_file: str = DEFAULT_INDEX_FILE
) -> Path | None:
    """Map a sanitized request path to a file below ``htdocs``.

    Args:
        htdocs: Root of the served tree.
        sanitized: Request path after sanitize_path.
        index_file: File name appended to paths ending in ``/``.

    Returns:
        The file to serve, or None if the path names a source document.
    """
    if sanitized.endswith("/"):
        sanitized += index_file
    candidate = htdocs / sanitized.lstrip("/")
    # Checked on the joined path: pathlib drops trailing "." segments.
    if candidate.name.endswith(MARKER_SUFFIX):
        return None
    return candidate


class _PreviewHandler(BaseHTTPRequestHandler):
    """Serves files from ``htdocs`` as raw bytes.

    Attributes:
        htdocs: Root of the served tree, set on a per-server subclass.
        index_file: File served for directory paths.
    """

    htdocs: Path = Path("htdocs")
    index_file = DEFAULT_INDEX_FILE
    server_version = f"sssg/{__version__}"
    protocol_version = "HTTP/1.1"

    def handle_one_request(self):
        # Keep-alive reuses the handler; drop the previous request's path.
        self.path = ""
        super().handle_one_request()

    def do_GET(self):
        self._respond(include_body=True)

    def do_HEAD(self):
        self._respond(include_body=False)

    def _respond(self, include_body: bool) -> None:
        sanitized = sanitize_path(request_path(self.path))
        status, body, content_type = self._load(sanitized)

        try:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
            self.end_headers()
            if include_body:
                self.wfile.write(body)
            self.wfile.flush()
        except OSError as exc:
            raise ResponseError(
                f"Error sending response for '{sanitized}' ({exc})"
            ) from exc

    def _load(self, sanitized: str) -> tuple[int, bytes, str]:
        """Read the file for a sanitized path.

        Returns:
            Tuple of (status code, body, content type).
        """
        filename = resolve_request(self.htdocs, sanitized, self.index_file)
        if filename is None:
            return 404, b"File not found", "text/plain; charset=utf-8"
        try:
            contents = filename.read_bytes()
        except (OSError, ValueError) as exc:
            message = f"Error reading file '{filename}' ({exc})"
            return 404, message.encode("utf-8"), "text/plain; charset=utf-8"
        content_type, _ = mimetypes.guess_type(filename.name)
        return 200, contents, content_type or "application/octet-stream"

    def log_request(self, code="-", size="-"):
        """Log one line per response, including the library's own errors.

        send_response calls this once per response, so 501 and 400 replies
        from send_error are logged the same way as files served by _respond.
        """
        sanitized = sanitize_path(request_path(self.path))
        logger.info(
            "[%s] %s %s %s",
            datetime.now().isoformat(sep=" "),
            int(code) if isinstance(code, int) else code,
            self.client_address[0],
            sanitized,
        )

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


class _PreviewHTTPServer(ThreadingHTTPServer):
    """Threading server that stops when a response cannot be sent."""

    daemon_threads = True

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fatal_error: ResponseError | None = None

    def handle_error(self, request, client_address):
        exc = sys.exc_info()[1]
        if isinstance(exc, ResponseError):
            logger.error("%s", exc)
            self.fatal_error = exc
            # shutdown() blocks until serve_forever returns, so it cannot
            # run on a request thread that the loop might wait for.
            threading.Thread(target=self.shutdown, daemon=True).start()
            return
        super().handle_error(request, client_address)


class PreviewServer:
    """HTTP server for previewing the htdocs tree.

    Attributes:
        htdocs: Root of the served tree.
        httpd: The underlying threading HTTP server.
    """

    def __init__(
        self,
        htdocs: Path,
        host: str = "0.0.0.0",
        port: int = 1337,
        index_file: str = DEFAULT_INDEX_FILE,
    ):
        """Bind the server socket.

        Args:
            htdocs: Directory to serve.
            host: Address to bind.
            port: Port to bind; 0 picks a free port.
            index_file: File served for paths ending in ``/``.
        """
        self.htdocs = htdocs
        handler_cls = type(
            "_PreviewHandlerForRoot",
            (_PreviewHandler,),
            {"htdocs": htdocs, "index_file": index_file},
        )
        self.httpd = _PreviewHTTPServer((host, port), handler_cls)

    @property
    def server_address(self) -> tuple[str, int]:
        host, port = self.httpd.server_address[:2]
        return str(host), int(port)

    def serve_forever(self) -> None:
        """Serve requests until shutdown.

        Raises:
            ResponseError: If a response could not be sent to a client.
        """
        host, port = self.server_address
        logger.info("Serving %s at http://%s:%d", self.htdocs, host, port)
        try:
            self.httpd.serve_forever()
        finally:
            self.httpd.server_close()
        if self.httpd.fatal_error is not None:
            raise self.httpd.fatal_error

    def shutdown(self) -> None:
        """Stop a running serve_forever loop from another thread."""
        self.httpd.shutdown()
