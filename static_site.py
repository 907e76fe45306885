"""
Serves the sales page and its assets from a single directory.

Unreadable paths (missing files, directories, permission errors and
anything that resolves outside the site root) either fall back to the
index page with a 200, so every URL answers with the site, or produce a
plain 404, depending on `not_found_behavior`.
"""
import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

FALLBACK_TO_INDEX = "fallback_to_index"
RESPOND_404 = "respond_404"
NOT_FOUND_BEHAVIORS = (FALLBACK_TO_INDEX, RESPOND_404)

MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".svg": "image/svg+xml",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class StaticResponse:
    body: bytes
    status: int
    content_type: str


def content_type_for(file_path: str) -> str:
    return MIME_TYPES.get(os.path.splitext(file_path)[1].lower(), DEFAULT_MIME_TYPE)


class StaticSite:
    def __init__(self, root: str, index: str = "index.html", not_found_behavior: str = FALLBACK_TO_INDEX):
        if not_found_behavior not in NOT_FOUND_BEHAVIORS:
            raise ValueError(f"Unknown not_found_behavior '{not_found_behavior}'")
        self.root = os.path.realpath(root)
        self.index = index
        self.not_found_behavior = not_found_behavior

    @property
    def index_path(self) -> str:
        return os.path.join(self.root, self.index)

    def resolve(self, request_path: str) -> str:
        """
        Maps a URL path to a file under the root. Raises PermissionError for
        paths that escape the root or carry a NUL byte, so they take the
        same route as any other unreadable file.
        """
        relative = request_path.lstrip("/")
        if not relative:
            return self.index_path
        if "\x00" in relative:
            raise PermissionError(f"{request_path!r} contains a NUL byte")

        candidate = os.path.realpath(os.path.join(self.root, relative))
        if os.path.commonpath([self.root, candidate]) != self.root:
            raise PermissionError(f"'{request_path}' is outside the site root")
        return candidate

    def respond(self, request_path: str) -> StaticResponse:
        try:
            file_path = self.resolve(request_path)
            with open(file_path, "rb") as f:
                content = f.read()
        except (OSError, ValueError) as e:
            return self._not_found(request_path, e)

        return StaticResponse(content, 200, content_type_for(file_path))

    def _not_found(self, request_path: str, error: Exception) -> StaticResponse:
        if self.not_found_behavior == RESPOND_404:
            logger.debug(f"No static file for '{request_path}': {error}")
            return StaticResponse(b"Not Found", 404, "text/plain")

        logger.debug(f"No static file for '{request_path}' ({error}), serving {self.index}")
        try:
            with open(self.index_path, "rb") as f:
                return StaticResponse(f.read(), 200, "text/html")
        except OSError as e:
            logger.error(f"Index page {self.index_path} is unreadable: {e}")
            return StaticResponse(b"Not Found", 404, "text/plain")
