"""Static asset serving with single page application fallback."""

from __future__ import annotations

import asyncio
import mimetypes
import os
import stat as stat_module
from dataclasses import dataclass
from email.utils import formatdate
from pathlib import Path
from typing import Mapping

from .exceptions import HTTPError
from .http import Status
from .responses import Response


def _stat_path_info(path: str) -> tuple[int, float, int]:
    metadata = os.stat(path)
    return metadata.st_size, metadata.st_mtime, metadata.st_mode


def _read_path_bytes(path: str) -> bytes:
    return Path(path).read_bytes()


@dataclass(slots=True, frozen=True)
class _FileMetadata:
    st_size: int
    st_mtime: float
    st_mode: int

    @property
    def is_dir(self) -> bool:
        return stat_module.S_ISDIR(self.st_mode)

    @property
    def is_file(self) -> bool:
        return stat_module.S_ISREG(self.st_mode)


class StaticAssets:
    """Serve files rooted at ``directory``; unknown paths fall back to ``index_file``."""

    def __init__(
        self,
        directory: str | os.PathLike[str],
        *,
        index_file: str | None = "index.html",
        cache_control: str | None = "public, max-age=3600",
        content_types: Mapping[str, str] | None = None,
    ) -> None:
        root = Path(os.fspath(directory))
        if not root.is_dir():
            raise ValueError(f"Static directory {root!s} does not exist or is not a directory")
        if index_file is not None and Path(index_file).is_absolute():
            raise ValueError("index_file must be a relative path")
        self._root = root.resolve()
        self._index_file = index_file
        self._cache_control = cache_control
        self._content_types = {suffix.lower(): value for suffix, value in (content_types or {}).items()}

    async def serve(self, path: str, *, method: str) -> Response:
        """Return a :class:`Response` for ``path`` using the provided HTTP ``method``."""

        method = method.upper()
        if method not in {"GET", "HEAD"}:
            raise HTTPError(Status.METHOD_NOT_ALLOWED, "method not allowed")
        target, metadata = await self._locate(path)
        body = await self._read_file(target) if method == "GET" else b""
        header_pairs = [
            ("content-type", self._content_type_for(target)),
            ("content-length", str(metadata.st_size)),
            ("last-modified", formatdate(metadata.st_mtime, usegmt=True)),
        ]
        if self._cache_control:
            header_pairs.append(("cache-control", self._cache_control))
        return Response(status=int(Status.OK), headers=tuple(header_pairs), body=body)

    async def _locate(self, path: str) -> tuple[Path, _FileMetadata]:
        relative = self._sanitize(path)
        target = (self._root / relative).resolve()
        self._ensure_within_root(target)
        try:
            metadata = await self._stat(target)
        except FileNotFoundError:
            return await self._index()
        if metadata.is_dir:
            return await self._index()
        if not metadata.is_file:
            raise HTTPError(Status.NOT_FOUND, "not found")
        return target, metadata

    async def _index(self) -> tuple[Path, _FileMetadata]:
        if self._index_file is None:
            raise HTTPError(Status.NOT_FOUND, "not found")
        index_target = (self._root / self._index_file).resolve()
        self._ensure_within_root(index_target)
        try:
            metadata = await self._stat(index_target)
        except FileNotFoundError as exc:
            raise HTTPError(Status.NOT_FOUND, "not found") from exc
        if not metadata.is_file:
            raise HTTPError(Status.NOT_FOUND, "not found")
        return index_target, metadata

    def _ensure_within_root(self, target: Path) -> None:
        try:
            target.relative_to(self._root)
        except ValueError as exc:
            raise HTTPError(Status.NOT_FOUND, "not found") from exc

    def _sanitize(self, path: str) -> Path:
        raw = (path or "").lstrip("/")
        if not raw:
            return Path(".")
        candidate = Path(raw)
        if candidate.is_absolute() or any(part == ".." for part in candidate.parts):
            raise HTTPError(Status.NOT_FOUND, "not found")
        return candidate

    def _content_type_for(self, path: Path) -> str:
        override = self._content_types.get(path.suffix.lower())
        if override:
            return override
        guessed, _ = mimetypes.guess_type(path.name)
        if guessed is None:
            return "application/octet-stream"
        if guessed.startswith("text/") and "charset=" not in guessed:
            return f"{guessed}; charset=utf-8"
        return guessed

    async def _stat(self, path: Path) -> _FileMetadata:
        loop = asyncio.get_running_loop()
        size, mtime, mode = await loop.run_in_executor(None, _stat_path_info, os.fspath(path))
        return _FileMetadata(st_size=size, st_mtime=mtime, st_mode=mode)

    async def _read_file(self, path: Path) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _read_path_bytes, os.fspath(path))


__all__ = ["StaticAssets"]
