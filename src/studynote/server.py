"""Static asset server for the rendered notebook."""

from __future__ import annotations

import logging
import os
import posixpath
import shutil
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Optional
from urllib.parse import unquote, urlsplit

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".js": "application/javascript; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".json": "application/json; charset=utf-8",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".txt": "text/plain; charset=utf-8",
}
FALLBACK_TYPE = "application/octet-stream"
INDEX_DOCUMENT = "/index.html"
CHUNK_SIZE = 64 * 1024


def content_type_for(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    return MIME_TYPES.get(ext, FALLBACK_TYPE)


def resolve_file_path(root: str, request_path: str) -> Optional[str]:
    """Map a URL path onto the asset root, or None if it escapes the root."""
    root = os.path.realpath(root)
    decoded = unquote(request_path or "/")
    if "\x00" in decoded:
        return None
    safe_path = posixpath.normpath(decoded.replace("\\", "/")).lstrip("/")
    if safe_path in ("", "."):
        return root
    file_path = os.path.realpath(os.path.join(root, *safe_path.split("/")))
    if os.path.commonpath([root, file_path]) != root:
        return None
    return file_path


class StaticHandler(BaseHTTPRequestHandler):
    asset_root = "."
    server_version = "StudyNote"

    def log_message(self, format: str, *args) -> None:
        logger.info("%s %s", self.address_string(), format % args)

    def _send_text(self, status: int, text: str) -> None:
        body = text.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def _serve(self) -> None:
        pathname = urlsplit(self.path).path or "/"
        if pathname == "/":
            pathname = INDEX_DOCUMENT

        file_path = resolve_file_path(self.asset_root, pathname)
        if file_path is None:
            logger.warning("Rejected path outside asset root: %s", pathname)
            self._send_text(403, "403 Forbidden")
            return
        if not os.path.isfile(file_path):
            self._send_text(404, "404 Not Found")
            return

        try:
            handle = open(file_path, "rb")
        except OSError as exc:
            logger.error("Failed to open %s: %s", file_path, exc)
            self._send_text(500, "500 Internal Server Error")
            return

        with handle:
            size = os.fstat(handle.fileno()).st_size
            self.send_response(200)
            self.send_header("Content-Type", content_type_for(file_path))
            self.send_header("Content-Length", str(size))
            self.end_headers()
            if self.command == "HEAD":
                return
            try:
                shutil.copyfileobj(handle, self.wfile, CHUNK_SIZE)
            except OSError as exc:
                # Headers are already out; the connection is dropped instead.
                logger.error("Failed while streaming %s: %s", file_path, exc)
                self.close_connection = True

    def do_GET(self) -> None:
        self._serve()

    def do_HEAD(self) -> None:
        self._serve()


def create_server(root: str, host: str = "127.0.0.1", port: int = 5173) -> HTTPServer:
    handler = type("BoundStaticHandler", (StaticHandler,), {"asset_root": os.path.abspath(root)})
    return HTTPServer((host, port), handler)


def serve(root: str, host: str = "127.0.0.1", port: int = 5173) -> None:
    server = create_server(root, host, port)
    bound_host, bound_port = server.server_address[:2]
    logger.info("Serving %s on http://%s:%s", root, bound_host, bound_port)
    print(f"StudyNote running at http://{bound_host}:{bound_port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server stopped")
    finally:
        server.server_close()
