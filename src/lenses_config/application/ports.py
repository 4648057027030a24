"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts the composition root relies on so codecs and
path resolvers can be swapped (tests, alternative formats) without touching
the lookup logic.

Contents
--------
* :class:`Codec` – paired encode/decode for one on-disk format.
* :class:`PathResolver` – ordered search roots plus the persistence directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Protocol, runtime_checkable

from ..domain.config import Configuration


@runtime_checkable
class Codec(Protocol):
    """Convert between bytes and :class:`Configuration` for one format."""

    name: str

    def decode(self, payload: bytes, *, path: str = ...) -> Configuration:
        """Return the decoded configuration or raise ``InvalidFormat``."""

    def encode(self, configuration: Configuration) -> bytes:
        """Return *configuration* serialised in this format."""


@runtime_checkable
class PathResolver(Protocol):
    """Enumerate the directories searched for configuration files.

    Methods
    -------
    :meth:`roots`
        Search roots in priority order (first match wins).
    :meth:`config_home`
        Directory new configuration files are written to.
    """

    def roots(self) -> Iterable[Path]:
        """Yield search roots, highest priority first."""

    def config_home(self) -> Path:
        """Return the per-user configuration directory."""
