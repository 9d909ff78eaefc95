"""
Module: engine.previews

Purpose:
    Resource lifecycle management for preview buffers. Issues revocable
    handles for byte buffers, one live handle per key, and revokes them
    when their owner is removed or the session ends.

Key Classes:
    - PreviewHandle: Revocable reference to a buffer (immutable)
    - PreviewRegistry: Owned map from key to buffer

Dependencies:
    - threading (std): Serializes acquire/release
    - uuid (std): Unique handle tokens

Used By:
    - engine.sources: Source previews keyed by source id
    - engine.ranges: Releases range previews on removal
    - compose.previewer: Split range previews
    - engine.session: release_all() on teardown
"""

from __future__ import annotations

import io
import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Tuple, Union

from pdf_toolkit.core.errors import NotFoundError

logger = logging.getLogger(__name__)

PREVIEW_SCHEME = "preview"
DEFAULT_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True)
class PreviewHandle:
    """
    Revocable reference to a preview buffer.

    The handle carries no bytes; callers resolve it through the registry
    that issued it. Once revoked, resolving it fails.

    Attributes:
        key: Owning entity key (source id or range key)
        token: Unique token, never reused
        size: Byte length of the buffer
        media_type: MIME type of the buffer

    Example:
        >>> handle = registry.acquire("src-1", pdf_bytes)
        >>> handle.url
        'preview://src-1/3f9c...'
    """

    key: Hashable
    token: str
    size: int
    media_type: str = DEFAULT_MEDIA_TYPE

    @property
    def url(self) -> str:
        """Opaque identifier the UI can pass back to open()."""
        return f"{PREVIEW_SCHEME}://{_key_label(self.key)}/{self.token}"


class PreviewRegistry:
    """
    Owned map from key to preview buffer.

    acquire() and release() are the only mutation points. Acquiring a key
    that already holds a handle revokes the old handle first, so there is
    exactly one live handle per key. All mutations run under one lock, so
    two acquisitions for the same key cannot interleave.

    Usage:
        registry = PreviewRegistry()
        try:
            handle = registry.acquire(source.id, source.data)
            stream = registry.open(handle)
        finally:
            registry.release_all()
    """

    def __init__(self) -> None:
        self._entries: Dict[Hashable, Tuple[PreviewHandle, bytes]] = {}
        self._lock = threading.Lock()

    def acquire(self, key: Hashable, data: bytes, media_type: str = DEFAULT_MEDIA_TYPE) -> PreviewHandle:
        """
        Issue a handle for `data` under `key`.

        Any handle previously issued under `key` is revoked before the
        new one becomes live.

        Args:
            key: Owning entity key
            data: Buffer to expose
            media_type: MIME type reported with the handle

        Returns:
            The new live PreviewHandle
        """
        handle = PreviewHandle(key=key, token=uuid.uuid4().hex, size=len(data), media_type=media_type)
        with self._lock:
            previous = self._entries.pop(key, None)
            self._entries[key] = (handle, data)
        if previous is not None:
            logger.debug(f"Replaced preview for {key!r} (revoked {previous[0].token})")
        else:
            logger.debug(f"Acquired preview for {key!r} ({handle.size} bytes)")
        return handle

    def release(self, key: Hashable) -> bool:
        """
        Revoke the handle under `key`.

        Idempotent: releasing an absent or already released key is a no-op.

        Returns:
            True if a handle was revoked
        """
        with self._lock:
            entry = self._entries.pop(key, None)
        if entry is None:
            return False
        logger.debug(f"Released preview for {key!r}")
        return True

    def release_all(self) -> int:
        """
        Revoke every outstanding handle.

        Returns:
            Number of handles revoked
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        if count:
            logger.debug(f"Released {count} previews")
        return count

    def get(self, key: Hashable) -> Optional[PreviewHandle]:
        """Return the live handle under `key`, or None."""
        with self._lock:
            entry = self._entries.get(key)
        return entry[0] if entry else None

    def is_live(self, handle: PreviewHandle) -> bool:
        """Check whether `handle` is still the live handle for its key."""
        with self._lock:
            entry = self._entries.get(handle.key)
        return entry is not None and entry[0].token == handle.token

    def read(self, handle: Union[PreviewHandle, str]) -> bytes:
        """
        Return the buffer behind a live handle or handle URL.

        Raises:
            NotFoundError: If the handle was revoked or never issued here
        """
        token = handle.token if isinstance(handle, PreviewHandle) else _token_from_url(handle)
        with self._lock:
            for live, data in self._entries.values():
                if live.token == token:
                    return data
        raise NotFoundError(f"Preview handle revoked or unknown: {token}", key=token)

    def open(self, handle: Union[PreviewHandle, str]) -> io.BytesIO:
        """Return a streamable view of the buffer behind a live handle."""
        return io.BytesIO(self.read(handle))

    def keys(self) -> List[Hashable]:
        """Keys that currently hold a live handle."""
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _key_label(key: Hashable) -> str:
    if isinstance(key, tuple):
        return "-".join(str(part) for part in key)
    return str(key)


def _token_from_url(url: str) -> str:
    prefix = f"{PREVIEW_SCHEME}://"
    if not url.startswith(prefix):
        raise NotFoundError(f"Not a preview URL: {url!r}", key=url)
    return url.rsplit("/", 1)[-1]


def source_key(source_id: str) -> Tuple[str, str]:
    """Registry key for a source document preview."""
    return ("source", source_id)


def range_key(range_id: int) -> Tuple[str, int]:
    """Registry key for a split range preview."""
    return ("range", range_id)
