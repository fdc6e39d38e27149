"""Granian integration helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import msgspec
from granian import Granian

from .routing import Router

_CURRENT_ROUTER: Router | None = None


def _path_state(path: str | Path | None) -> tuple[Path | None, bool]:
    """Return a tuple of the normalized path and whether it exists."""

    if path is None:
        return None, False
    resolved = path if isinstance(path, Path) else Path(path)
    return resolved, resolved.exists()


def _register_current_router(router: Router) -> None:
    """Store ``router`` for retrieval by worker processes."""

    global _CURRENT_ROUTER
    _CURRENT_ROUTER = router


def _clear_current_router() -> None:
    global _CURRENT_ROUTER
    _CURRENT_ROUTER = None


def _current_router_loader() -> Router:
    """Return the router registered for the current process."""

    if _CURRENT_ROUTER is None:
        raise RuntimeError("no autohttp router registered for Granian")
    return _CURRENT_ROUTER


class ServerConfig(msgspec.Struct, frozen=True):
    host: str = "127.0.0.1"
    port: int = 8080
    interface: str = "asgi"
    loop: str = "auto"
    workers: int = 1
    certificate_path: str | Path | None = None
    private_key_path: str | Path | None = None


def _granian_kwargs(cfg: ServerConfig) -> Mapping[str, Any]:
    cert_path, cert_exists = _path_state(cfg.certificate_path)
    key_path, key_exists = _path_state(cfg.private_key_path)
    if (cert_path is None) != (key_path is None):
        raise RuntimeError("TLS requires both certificate_path and private_key_path")
    missing = [str(path) for path, exists in ((cert_path, cert_exists), (key_path, key_exists)) if path and not exists]
    if missing:
        raise RuntimeError(f"TLS assets not found: {', '.join(missing)}")

    kwargs: dict[str, Any] = {
        "address": cfg.host,
        "port": cfg.port,
        "interface": cfg.interface,
        "loop": cfg.loop,
        "workers": cfg.workers,
    }
    if cert_path is not None and key_path is not None:
        kwargs["ssl_cert"] = cert_path
        kwargs["ssl_key"] = key_path
    return kwargs


def create_server(router: Router, config: ServerConfig | None = None) -> Granian:
    cfg = config or ServerConfig()
    router.freeze()
    _register_current_router(router)
    try:
        kwargs = _granian_kwargs(cfg)
        return Granian("autohttp.server:_current_router_loader", **kwargs)
    except Exception:
        _clear_current_router()
        raise


def run(router: Router, config: ServerConfig | None = None) -> None:
    server = create_server(router, config)
    try:
        server.serve(target_loader=_current_router_loader, wrap_loader=False)
    finally:
        _clear_current_router()
