"""Request header bag handed to handlers."""

from __future__ import annotations

from typing import Iterable

_TOKEN_CHARS = frozenset("!#$%&'*+-.^_`|~0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")


def canonical_header_key(name: str) -> str:
    """Return ``name`` in canonical MIME form, e.g. ``content-type`` -> ``Content-Type``.

    Names containing characters outside the HTTP token set are returned unchanged.
    """

    if not name or any(char not in _TOKEN_CHARS for char in name):
        return name
    parts = name.split("-")
    return "-".join(part[:1].upper() + part[1:].lower() for part in parts)


class Header(dict[str, str]):
    """Canonical header name to first value, built fresh for every request."""

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "Header":
        bag = cls()
        for name, value in pairs:
            bag.setdefault(canonical_header_key(name), value)
        return bag

    def get_header(self, name: str, default: str | None = None) -> str | None:
        return self.get(canonical_header_key(name), default)
