"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by the codecs, the locator, the resolver and
the CLI. The hierarchy lives in the domain layer so adapters depend on it and
not the other way round.

Contents
--------
* :class:`ConfigError` – umbrella base class for all configuration issues.
* :class:`NotFound` – no configuration file (or named context) could be found.
* :class:`InvalidFormat` – a file exists but is not a compatible document.
* :class:`ValidationError` – a document decoded fine but is not usable.

System Role
-----------
The locator swallows per-file :class:`NotFound` / :class:`InvalidFormat`
failures while it searches and only raises the aggregate outcome. Callers catch
:class:`ConfigError` to handle every library failure uniformly. Refusing to
remove a context is not an error: it is reported as ``False``.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lenses_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class NotFound(ConfigError):
    """Represents a missing-but-recoverable resource.

    Why
    ----
    No configuration file in any search root is the normal first-run state:
    the caller falls back to interactive setup instead of aborting.
    """


class InvalidFormat(ConfigError):
    """Raised when an existing file cannot be decoded by any registered codec.

    Why
    ----
    Distinguish a user error in an existing file from the absence of a file.

    Typical Sources
    ---------------
    :mod:`json` and :mod:`yaml` parse errors, non-mapping documents, unknown
    authentication shapes, candidate files that cannot be read.

    Attributes
    ----------
    paths:
        Files that exist but failed to decode, highest priority first. Empty
        when the error concerns an in-memory payload.
    """

    def __init__(self, message: str, *, paths: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.paths = paths


class ValidationError(ConfigError):
    """Signifies that a decoded configuration fails the validity invariant.

    Why
    ----
    A missing host or missing credentials should trigger repair (re-running
    ``configure``), never be confused with a broken file.
    """
