"""Filesystem path resolution for configuration lookup.

Purpose
-------
Implement the :class:`lenses_config.application.ports.PathResolver` protocol by
encapsulating OS-specific rules: where the user's home directory is, which
directories are searched and in what order, and which filenames are candidates
inside each of them.

Contents
--------
* :data:`CONFIGURATION_FILENAMES` – candidate filenames, in lookup order.
* :data:`CONFIG_DIR_ENV` – environment override for the home config directory.
* :func:`home_dir` – cross-platform home directory resolution.
* :class:`DefaultPathResolver` – home config dir, executable dir, working dir.
* :func:`candidate_paths` – candidate files inside one directory.

System Role
-----------
Feeds deterministic directory lists into
:func:`lenses_config.core.locate_configuration`. Environment and platform are
injectable so tests never depend on the real home directory.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, Final, Iterable, Mapping

try:
    import pwd
except ModuleNotFoundError:  # pragma: no cover - not available on Windows
    pwd = None  # type: ignore[assignment]

from ...domain.errors import NotFound
from ...observability import log_debug

#: Candidate filenames tried in every search root. The ``lenses-cli`` names let
#: the CLI and library consumers share one file in the home directory.
CONFIGURATION_FILENAMES: Final[tuple[str, ...]] = (
    "lenses.yml",
    "lenses.yaml",
    "lenses.json",
    ".lenses.yml",
    ".lenses.yaml",
    ".lenses.json",
    "lenses-cli.yml",
    "lenses-cli.yaml",
    "lenses-cli.json",
    ".lenses-cli.yml",
    ".lenses-cli.yaml",
    ".lenses-cli.json",
)

#: Filename used when a configuration is persisted for the first time.
DEFAULT_FILENAME: Final[str] = "lenses-cli.yml"

CONFIG_DIR_NAME: Final[str] = ".lenses"
CONFIG_DIR_ENV: Final[str] = "LENSES_CONFIG_DIR"


def _user_record_home() -> str:
    """Return the home directory stored in the OS user database, if any."""

    if pwd is None:
        return ""
    try:
        return pwd.getpwuid(os.getuid()).pw_dir or ""
    except KeyError:
        return ""


def home_dir(
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
    user_home: Callable[[], str] = _user_record_home,
) -> str:
    """Return the current user's home directory, or ``""`` when unknown.

    Why
    ----
    The primary search root lives under the home directory on every OS, but
    neither the user database nor ``HOME`` is guaranteed to exist everywhere.

    What
    ----
    Tries, in order: the OS user record, ``HOME``, then ``home`` on Plan 9 or
    ``HOMEDRIVE`` + ``HOMEPATH`` and finally ``USERPROFILE`` on Windows.

    Examples
    --------
    >>> home_dir(env={"HOME": "/home/demo"}, platform="linux", user_home=lambda: "")
    '/home/demo'
    >>> home_dir(env={"HOMEDRIVE": "C:", "HOMEPATH": "/Users/demo"}, platform="win32", user_home=lambda: "")
    'C:/Users/demo'
    >>> home_dir(env={}, platform="linux", user_home=lambda: "")
    ''
    """

    environ = os.environ if env is None else env
    current_platform = platform or sys.platform

    home = user_home()
    if not home:
        home = environ.get("HOME", "")
    if not home:
        if current_platform == "plan9":
            home = environ.get("home", "")
        elif current_platform.startswith("win"):
            home = environ.get("HOMEDRIVE", "") + environ.get("HOMEPATH", "")
            if not home:
                home = environ.get("USERPROFILE", "")
    return home


class DefaultPathResolver:
    """Resolve the ordered search roots for configuration files.

    Why
    ----
    Centralise path discovery so the composition root stays platform-agnostic
    and easy to test.
    """

    def __init__(
        self,
        *,
        cwd: Path | None = None,
        executable: str | Path | None = None,
        env: Mapping[str, str] | None = None,
        platform: str | None = None,
        user_home: Callable[[], str] = _user_record_home,
    ) -> None:
        """Store the context required to resolve filesystem locations.

        Parameters
        ----------
        cwd:
            Working directory searched last. Defaults to :func:`Path.cwd`.
        executable:
            Path of the running program; its directory is searched second.
            Defaults to ``sys.argv[0]`` when that is a real file, otherwise
            ``sys.executable``.
        env:
            Mapping merged over ``os.environ`` (useful for deterministic tests).
        platform:
            ``sys.platform`` clone used for home directory fallbacks.
        user_home:
            Callable returning the OS user-record home directory.
        """

        self.cwd = cwd or Path.cwd()
        self.executable = Path(executable) if executable is not None else _default_executable()
        self.env = {**os.environ, **(env or {})}
        self.platform = platform or sys.platform
        self._user_home = user_home

    def config_home(self) -> Path:
        """Return ``<home>/.lenses`` or the ``LENSES_CONFIG_DIR`` override.

        Raises
        ------
        NotFound
            When no home directory can be determined and no override is set.
        """

        override = self.env.get(CONFIG_DIR_ENV)
        if override:
            return Path(override)
        home = home_dir(env=self.env, platform=self.platform, user_home=self._user_home)
        if not home:
            raise NotFound(f"Cannot determine the home directory; set {CONFIG_DIR_ENV}")
        return Path(home) / CONFIG_DIR_NAME

    def executable_dir(self) -> Path:
        return self.executable.resolve().parent

    def roots(self) -> Iterable[Path]:
        """Return search roots: home config dir, executable dir, working dir.

        Duplicates (e.g. running from the working directory) are searched once.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> root = Path(tmp.name)
        >>> resolver = DefaultPathResolver(
        ...     cwd=root / "work",
        ...     executable=root / "bin" / "lenses-config",
        ...     env={"LENSES_CONFIG_DIR": str(root / "home")},
        ... )
        >>> [path.name for path in resolver.roots()]
        ['home', 'bin', 'work']
        >>> tmp.cleanup()
        """

        candidates: list[Path] = []
        try:
            candidates.append(self.config_home())
        except NotFound:
            log_debug("home_unresolved", context=None, path=None)
        candidates.append(self.executable_dir())
        candidates.append(self.cwd)

        roots: list[Path] = []
        seen: set[Path] = set()
        for candidate in candidates:
            key = candidate.resolve()
            if key in seen:
                continue
            seen.add(key)
            roots.append(candidate)
        log_debug("search_roots", context=None, path=None, roots=[str(root) for root in roots])
        return roots


def candidate_paths(directory: Path) -> Iterable[Path]:
    """Yield every candidate filename inside *directory*, in lookup order.

    Examples
    --------
    >>> [path.name for path in candidate_paths(Path("/etc/lenses"))][:3]
    ['lenses.yml', 'lenses.yaml', 'lenses.json']
    """

    for filename in CONFIGURATION_FILENAMES:
        yield directory / filename


def _default_executable() -> Path:
    argv0 = sys.argv[0] if sys.argv else ""
    if argv0 and Path(argv0).is_file():
        return Path(argv0)
    return Path(sys.executable)


__all__ = [
    "CONFIGURATION_FILENAMES",
    "CONFIG_DIR_ENV",
    "CONFIG_DIR_NAME",
    "DEFAULT_FILENAME",
    "DefaultPathResolver",
    "candidate_paths",
    "home_dir",
]
