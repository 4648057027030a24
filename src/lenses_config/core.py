"""Composition root for ``lenses_config``.

Purpose
-------
Provide the entry points that combine path resolution, codecs and the domain
model: find a configuration file, decode it, validate it, apply overrides, and
write it back.

Contents
--------
* :class:`LocatedConfiguration` – a decoded configuration plus where it came from.
* :func:`read_configuration_from_file` – decode one file with one codec.
* :func:`try_read_configuration_from_file` – decode one file with the first codec that fits.
* :func:`lookup_configuration` – search one directory for candidate filenames.
* :func:`locate_configuration` – search every root, first match wins.
* :func:`write_configuration` – persist with a codec chosen by suffix.
* :class:`ConfigurationResolver` – holds the single in-memory configuration of
  an invocation and exposes the load/mutate/save operations callers need.

System Role
-----------
This module connects adapters (path resolver, codecs) with the domain value
objects while emitting structured observability signals. Per-file and
per-codec failures are expected while searching and are only logged; the
aggregate outcome is raised as :class:`NotFound` (nothing there) or
:class:`InvalidFormat` (something there, but broken).
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from .adapters.codecs.structured import DEFAULT_CODECS, JSONCodec, YAMLCodec
from .adapters.path_resolvers.default import DEFAULT_FILENAME, DefaultPathResolver, candidate_paths
from .application.merge import fill_layers
from .application.ports import Codec, PathResolver
from .domain.config import DEFAULT_CONTEXT_KEY, ClientConfiguration, Configuration
from .domain.errors import InvalidFormat, NotFound, ValidationError
from .observability import log_debug, log_error, log_info, make_event

_SUPPORTED_FORMATS = "JSON, YAML"


@dataclass(frozen=True, slots=True)
class LocatedConfiguration:
    """A decoded configuration together with its file and codec."""

    configuration: Configuration
    path: Path
    codec: Codec


def read_configuration_from_file(path: str | Path, codec: Codec) -> Configuration:
    """Decode the file at *path* with *codec*.

    Relative paths are resolved against the working directory.

    Raises
    ------
    NotFound
        When *path* is not a file.
    InvalidFormat
        When *codec* rejects the content.
    """

    return codec.decode(_read(Path(path)), path=str(Path(path).absolute()))


def try_read_configuration_from_file(
    path: str | Path,
    codecs: Sequence[Codec] = DEFAULT_CODECS,
) -> tuple[Configuration, Codec]:
    """Decode *path* with the first of *codecs* that accepts it.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / "lenses.yml"
    >>> _ = target.write_text("CurrentContext: dev\\nContexts:\\n  dev:\\n    Host: x:443\\n", encoding="utf-8")
    >>> configuration, codec = try_read_configuration_from_file(target)
    >>> codec.name, configuration.contexts["dev"].host
    ('yaml', 'x:443')
    >>> tmp.cleanup()
    """

    file_path = Path(path).absolute()
    payload = _read(file_path)
    for codec in codecs:
        try:
            return codec.decode(payload, path=str(file_path)), codec
        except InvalidFormat:
            continue
    raise InvalidFormat(
        f"Configuration file '{file_path}' is not formatted as a compatible document: {_SUPPORTED_FORMATS}"
    )


def lookup_configuration(directory: str | Path, codecs: Sequence[Codec] = DEFAULT_CODECS) -> LocatedConfiguration:
    """Return the first candidate file in *directory* that decodes.

    Why
    ----
    Users name their file ``lenses.yml``, ``.lenses-cli.json`` and so on; every
    known name is tried with every codec before giving up on a directory. A
    candidate that cannot be read (permissions, I/O errors) is skipped like one
    that does not decode.

    Raises
    ------
    NotFound
        When no candidate file exists in *directory*.
    InvalidFormat
        When candidates exist but none of them can be read and decoded.
    """

    base = Path(directory)
    invalid: list[str] = []
    unreadable: list[str] = []
    for candidate in candidate_paths(base):
        try:
            configuration, codec = try_read_configuration_from_file(candidate, codecs)
        except NotFound:
            continue
        except InvalidFormat as exc:
            log_debug("config_file_rejected", **make_event(None, str(candidate), {"error": str(exc)}))
            invalid.append(str(candidate))
            continue
        except OSError as exc:
            log_debug("config_file_rejected", **make_event(None, str(candidate), {"error": str(exc)}))
            unreadable.append(str(candidate))
            continue
        log_info("configuration_located", **make_event(configuration.current_context, str(candidate), {"format": codec.name}))
        return LocatedConfiguration(configuration=configuration, path=candidate, codec=codec)

    problems: list[str] = []
    if invalid:
        problems.append(
            f"Configuration file(s) {', '.join(invalid)} exist but are not formatted as a compatible document: "
            f"{_SUPPORTED_FORMATS}"
        )
    if unreadable:
        problems.append(f"Configuration file(s) {', '.join(unreadable)} exist but cannot be read")
    if problems:
        raise InvalidFormat("; ".join(problems), paths=tuple(invalid))
    raise NotFound(f"No configuration file found in {base}")


def locate_configuration(
    roots: Iterable[str | Path],
    codecs: Sequence[Codec] = DEFAULT_CODECS,
) -> LocatedConfiguration:
    """Search *roots* in order and return the first decodable configuration.

    A broken or unreadable file in one root does not stop the search; it is
    only reported when no root yields a usable file.

    Raises
    ------
    NotFound
        When no root contains a candidate file.
    InvalidFormat
        When candidate files exist but none decodes. ``paths`` lists the files
        that were read but failed to decode, in search order.
    """

    failures: list[str] = []
    broken: list[str] = []
    searched: list[str] = []
    for root in roots:
        searched.append(str(root))
        try:
            return lookup_configuration(root, codecs)
        except NotFound:
            continue
        except InvalidFormat as exc:
            failures.append(str(exc))
            broken.extend(exc.paths)

    if failures:
        log_error("configuration_invalid", **make_event(None, None, {"errors": failures}))
        raise InvalidFormat("; ".join(failures), paths=tuple(broken))
    log_info("configuration_not_found", **make_event(None, None, {"roots": searched}))
    raise NotFound(f"No configuration file found in: {', '.join(searched) or '(no search roots)'}")


def codec_for_path(path: str | Path) -> Codec:
    """Return the codec matching *path*'s suffix; YAML unless it ends in ``.json``.

    Examples
    --------
    >>> codec_for_path("lenses.json").name, codec_for_path("lenses-cli.yml").name
    ('json', 'yaml')
    """

    if Path(path).suffix.lower() == ".json":
        return JSONCodec()
    return YAMLCodec()


def write_configuration(configuration: Configuration, path: str | Path, codec: Codec | None = None) -> Path:
    """Persist *configuration* to *path*, creating parent directories.

    The payload goes to a temporary file in the target directory that is
    restricted to the owner and then renamed over *path*, so a failed write
    leaves the previous file untouched and credentials are never readable by
    other users.
    """

    target = Path(path)
    chosen = codec if codec is not None else codec_for_path(target)
    payload = chosen.encode(configuration)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(dir=target.parent, prefix=".lenses-config-")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
        os.chmod(temp_path, 0o600)
        Path(temp_path).replace(target)
    except Exception:
        Path(temp_path).unlink(missing_ok=True)
        raise
    log_info("configuration_saved", **make_event(configuration.current_context, str(target), {"format": chosen.name}))
    return target


class ConfigurationResolver:
    """Own the configuration of one CLI invocation.

    Why
    ----
    Command handlers need the loaded configuration, the flag overrides and a
    way to persist edits. Passing one resolver explicitly replaces a
    process-wide "current client" variable.

    What
    ----
    Wraps a :class:`Configuration` plus the file and codec it came from. Not
    safe for concurrent mutation; share across threads only with external
    locking.

    Examples
    --------
    >>> from lenses_config.domain.authentication import BasicAuthentication
    >>> resolver = ConfigurationResolver(configuration=Configuration())
    >>> resolver.apply_overrides([("flags", ClientConfiguration(host="x:443", authentication=BasicAuthentication("u", "p")))])
    True
    >>> resolver.validate().host
    'https://x:443'
    """

    def __init__(
        self,
        *,
        path_resolver: PathResolver | None = None,
        codecs: Sequence[Codec] = DEFAULT_CODECS,
        configuration: Configuration | None = None,
    ) -> None:
        self.path_resolver = path_resolver if path_resolver is not None else DefaultPathResolver()
        self.codecs = tuple(codecs)
        self.configuration = configuration if configuration is not None else Configuration()
        self.source: Path | None = None
        self.codec: Codec | None = None

    def load(self, *, discard_invalid: bool = False) -> bool:
        """Locate and decode the configuration; return whether it is valid.

        When no file exists the current (usually empty) configuration is kept
        and ``False`` is returned so the caller can start interactive setup.
        :class:`InvalidFormat` propagates unless *discard_invalid* is set: a
        broken file needs the user's attention, not silent replacement. With
        *discard_invalid* (used when the user is about to reconfigure) the
        configuration starts empty and :meth:`save` overwrites the highest
        priority broken file.
        """

        try:
            located = locate_configuration(self.path_resolver.roots(), self.codecs)
        except NotFound:
            return False
        except InvalidFormat as exc:
            if not discard_invalid:
                raise
            self._discard(exc)
            return False
        return self._adopt(located)

    def load_file(self, path: str | Path) -> bool:
        """Decode a specific file instead of searching; return whether it is valid."""

        configuration, codec = try_read_configuration_from_file(path, self.codecs)
        return self._adopt(LocatedConfiguration(configuration=configuration, path=Path(path), codec=codec))

    def _adopt(self, located: LocatedConfiguration) -> bool:
        located.configuration.format_hosts()
        self.configuration = located.configuration
        self.source = located.path
        self.codec = located.codec
        return self.configuration.is_valid()

    def _discard(self, exc: InvalidFormat) -> None:
        self.configuration = Configuration()
        self.source = Path(exc.paths[0]) if exc.paths else None
        self.codec = codec_for_path(self.source) if self.source is not None else None
        log_error(
            "configuration_discarded",
            **make_event(None, str(self.source) if self.source is not None else None, {"error": str(exc)}),
        )

    @property
    def current(self) -> ClientConfiguration:
        return self.configuration.get_current()

    def use_context(self, name: str, *, require_existing: bool = True) -> None:
        """Make *name* the current context.

        Raises
        ------
        NotFound
            When *name* does not exist and ``require_existing`` is set.
        """

        if require_existing and name not in self.configuration.contexts:
            raise NotFound(f"Context '{name}' does not exist")
        self.configuration.set_current(name)
        log_debug("context_selected", **make_event(name, None))

    def remove_context(self, name: str) -> bool:
        removed = self.configuration.remove_context(name)
        if removed:
            log_info("context_removed", **make_event(name, None, {"current": self.configuration.current_context}))
        else:
            log_info("context_removal_refused", **make_event(name, None))
        return removed

    def apply_overrides(self, layers: Iterable[tuple[str, ClientConfiguration]]) -> bool:
        """Merge override layers into the current context; return its validity.

        An empty current context name is pointed at the default context first so
        a valid layer seeds ``master`` rather than an unnamed entry.
        """

        if not self.configuration.current_context:
            self.configuration.set_current(DEFAULT_CONTEXT_KEY)
        return fill_layers(self.configuration, layers)

    def stage(self) -> Configuration:
        """Return a clone to edit speculatively before :meth:`commit`."""

        return self.configuration.clone()

    def commit(self, staged: Configuration) -> None:
        """Replace the held configuration with *staged* once it is valid.

        Raises
        ------
        ValidationError
            When *staged* fails :meth:`Configuration.is_valid`; the held
            configuration is left untouched.
        """

        _ensure_valid(staged)
        staged.format_hosts()
        self.configuration = staged

    def validate(self) -> ClientConfiguration:
        """Return the normalised current context of a valid configuration.

        Raises
        ------
        ValidationError
            When any context lacks a host or credentials, or the current
            context's timeout is malformed.
        """

        current = self.configuration.get_current()
        current.format_host()
        _ensure_valid(self.configuration)
        current.timeout_seconds()
        return current

    def save(self, path: str | Path | None = None, *, codec: Codec | None = None) -> Path:
        """Write the configuration back to disk and return the file path.

        Without *path*, the file it was loaded from is rewritten with the same
        codec; a configuration that was never loaded goes to
        ``<home>/.lenses/lenses-cli.yml``.
        """

        if path is not None:
            target = Path(path)
        elif self.source is not None:
            target = self.source
            codec = codec if codec is not None else self.codec
        else:
            target = self.path_resolver.config_home() / DEFAULT_FILENAME
        written = write_configuration(self.configuration, target, codec)
        self.source = written
        self.codec = codec if codec is not None else codec_for_path(written)
        return written


def _ensure_valid(configuration: Configuration) -> None:
    if not configuration.contexts:
        raise ValidationError("No contexts configured; run 'configure' first")
    invalid = configuration.invalid_contexts()
    if invalid:
        raise ValidationError(
            f"Context(s) {', '.join(invalid)} need a host and either a token or authentication; run 'configure'"
        )


def _read(path: Path) -> bytes:
    if not path.is_file():
        raise NotFound(f"Configuration file not found: {path}")
    payload = path.read_bytes()
    log_debug("config_file_read", **make_event(None, str(path), {"size": len(payload)}))
    return payload


__all__ = [
    "ConfigurationResolver",
    "LocatedConfiguration",
    "codec_for_path",
    "locate_configuration",
    "lookup_configuration",
    "read_configuration_from_file",
    "try_read_configuration_from_file",
    "write_configuration",
]
