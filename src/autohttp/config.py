"""Router configuration objects."""

from __future__ import annotations

from msgspec import Struct

from .decoders import DEFAULT_MAX_BYTES_TO_READ


class RouterConfig(Struct, frozen=True):
    """Typed configuration for a :class:`~autohttp.routing.Router`."""

    max_request_body_bytes: int = DEFAULT_MAX_BYTES_TO_READ
    disallow_unknown_fields: bool = True
    log_route_metrics: bool = False
    static_directory: str | None = None
    static_index_file: str | None = "index.html"
    static_cache_control: str | None = "public, max-age=3600"
