"""Domain-level configuration model.

Purpose
-------
Anchor the two records every other layer works with: one environment's
connection parameters (:class:`ClientConfiguration`) and the named collection
of them with a pointer to the active one (:class:`Configuration`). This module
contains no I/O.

Contents
--------
* :data:`DEFAULT_CONTEXT_KEY` – context name materialised when none is current.
* :func:`format_host` – deterministic ``scheme://host:port`` normalisation.
* :class:`ClientConfiguration` – one context: host, credentials, timeout, debug.
* :class:`Configuration` – all contexts plus ``current_context``.

System Role
-----------
Codecs produce :class:`Configuration` values, the resolver mutates them, and the
excluded HTTP client consumes the validated current :class:`ClientConfiguration`.
A non-empty ``token`` takes precedence over ``authentication`` when connecting.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Final, Iterator

from .authentication import Authentication, BasicAuthentication, KerberosAuthentication, MASK
from .duration import parse_duration

DEFAULT_CONTEXT_KEY: Final[str] = "master"

_SCHEME_SEPARATOR: Final[str] = "://"
_HTTPS_PORT: Final[str] = "443"
_HTTP_PORT: Final[str] = "80"


def format_host(host: str) -> str:
    """Return *host* rewritten to follow the ``scheme://host:port`` pattern.

    Why
    ----
    The HTTP layer appends API paths to the host verbatim, so the stored value
    must carry an explicit scheme and port and no trailing slash.

    What
    ----
    * Empty input is returned unchanged.
    * Trailing ``/`` characters are stripped.
    * A ``:`` after the ``://`` separator marks an explicit port; the colon of
      ``://`` itself does not.
    * Without a scheme, ``https://`` is chosen for port ``443`` and ``http://``
      otherwise.
    * With a scheme but no port, ``https`` implies ``443`` and anything else
      ``80``; the port is then appended.

    The rewrite is idempotent.

    Examples
    --------
    >>> format_host("example.com")
    'http://example.com:80'
    >>> format_host("example.com:443")
    'https://example.com:443'
    >>> format_host("https://example.com/")
    'https://example.com:443'
    >>> format_host(format_host("lenses:9991"))
    'http://lenses:9991'
    """

    if not host:
        return host

    host = host.rstrip("/")

    port_idx = host.rfind(":")
    scheme_idx = host.find(_SCHEME_SEPARATOR)
    has_scheme = scheme_idx >= 0
    has_port = port_idx > scheme_idx + 1

    port = host[port_idx + 1 :] if has_port else _HTTP_PORT

    if not has_scheme:
        prefix = "https" if port == _HTTPS_PORT else "http"
        host = f"{prefix}{_SCHEME_SEPARATOR}{host}"
    elif not has_port and host.startswith("https://"):
        port = _HTTPS_PORT

    if not has_port:
        host = f"{host}:{port}"
    return host


@dataclass(slots=True)
class ClientConfiguration:
    """Connection parameters of one addressable environment.

    Why
    ----
    Every CLI invocation needs exactly one host plus one way to authenticate;
    this record carries them together with the per-context timeout and debug
    switch.

    Attributes
    ----------
    host:
        ``scheme://host:port`` address of the service (see :func:`format_host`).
    authentication:
        One of the :data:`~lenses_config.domain.authentication.Authentication`
        variants or ``None``.
    token:
        Opaque bearer credential. When non-empty it overrides ``authentication``
        at connection time.
    timeout:
        Duration string such as ``"30s"``; empty means no timeout.
    debug:
        Enables verbose diagnostics in the HTTP layer.

    Examples
    --------
    >>> cfg = ClientConfiguration(host="lenses:443", token="t")
    >>> cfg.is_valid(), cfg.host
    (True, 'lenses:443')
    >>> cfg.format_host()
    >>> cfg.host
    'https://lenses:443'
    """

    host: str = ""
    authentication: Authentication | None = None
    token: str = ""
    timeout: str = ""
    debug: bool = False

    def is_valid(self) -> bool:
        """Return ``True`` when a host and at least one credential are present.

        The host is judged in its normalised form; the stored value is left
        untouched so callers decide when to rewrite it via :meth:`format_host`.
        """

        if not self.host:
            return False
        return format_host(self.host) != "" and (self.token != "" or self.authentication is not None)

    def format_host(self) -> None:
        """Normalise :attr:`host` in place."""

        self.host = format_host(self.host)

    def fill(self, other: ClientConfiguration) -> bool:
        """Override fields with the non-empty values of *other*.

        Why
        ----
        Values arrive from several sources (file, flags, interactive answers);
        each later source should only replace what it actually provides.

        What
        ----
        ``host``, ``token`` and ``timeout`` are replaced when *other* carries a
        non-empty, different value. ``debug`` is copied whenever it differs.
        ``authentication`` is replaced wholesale when *other* has one; the
        fields of two credentials are never mixed.

        Returns
        -------
        bool
            Post-merge validity, so callers can tell whether more input is needed.

        Examples
        --------
        >>> base = ClientConfiguration(host="http://a:80", token="old")
        >>> base.fill(ClientConfiguration(host="b:443", timeout="5s"))
        True
        >>> base.host, base.token, base.timeout
        ('b:443', 'old', '5s')
        """

        if other.host and other.host != self.host:
            self.host = other.host

        if other.authentication is not None:
            self.authentication = other.authentication

        if other.token and other.token != self.token:
            self.token = other.token

        if other.timeout and other.timeout != self.timeout:
            self.timeout = other.timeout

        if other.debug != self.debug:
            self.debug = other.debug

        return self.is_valid()

    @property
    def basic_authentication(self) -> BasicAuthentication | None:
        """Return the credential when it is basic authentication."""

        if isinstance(self.authentication, BasicAuthentication):
            return self.authentication
        return None

    @property
    def kerberos_authentication(self) -> KerberosAuthentication | None:
        """Return the credential when it is Kerberos authentication."""

        if isinstance(self.authentication, KerberosAuthentication):
            return self.authentication
        return None

    def timeout_seconds(self) -> float | None:
        """Return :attr:`timeout` in seconds, ``None`` when no timeout is set.

        Raises
        ------
        ValidationError
            When the duration string is malformed.
        """

        return parse_duration(self.timeout)

    def copy(self) -> ClientConfiguration:
        # Authentication variants are frozen, so a shallow field copy is deep enough.
        return replace(self)

    def describe(self) -> dict[str, Any]:
        """Return a JSON-safe view of the context with secrets masked.

        Examples
        --------
        >>> ClientConfiguration(host="http://a:80", token="abc").describe()["token"]
        '****'
        """

        authentication = self.authentication.describe() if self.authentication is not None else None
        return {
            "host": self.host,
            "authentication": authentication,
            "token": MASK if self.token else "",
            "timeout": self.timeout,
            "debug": self.debug,
        }


@dataclass(slots=True)
class Configuration:
    """Named collection of contexts plus the name of the active one.

    Why
    ----
    Operators talk to several environments (dev, staging, prod) from one
    machine; the CLI acts on the current context unless told otherwise.

    What
    ----
    Owns every :class:`ClientConfiguration` in :attr:`contexts` exclusively.
    :attr:`current_context` may name a context that does not exist yet;
    :meth:`get_current` heals that by creating an empty entry.

    A single instance is not safe for concurrent mutation. Share it between
    threads only behind external synchronisation.

    Examples
    --------
    >>> cfg = Configuration()
    >>> cfg.get_current() is cfg.contexts["master"], cfg.current_context
    (True, 'master')
    >>> cfg.is_valid()
    False
    """

    current_context: str = ""
    contexts: dict[str, ClientConfiguration] = field(default_factory=dict)

    def is_valid(self) -> bool:
        """Return ``True`` when there is at least one context and all are valid.

        Every context counts, not only the current one: a half-filled scratch
        context makes the whole document invalid.
        """

        if not self.contexts:
            return False
        return all(cfg.is_valid() for cfg in self.contexts.values())

    def invalid_contexts(self) -> list[str]:
        """Return the names of the contexts failing :meth:`ClientConfiguration.is_valid`."""

        return [name for name, cfg in self.contexts.items() if not cfg.is_valid()]

    def get_current(self) -> ClientConfiguration:
        """Return the current context, creating an empty one when it is missing.

        Why
        ----
        Callers (flag overrides, interactive setup) always need an entry to fill,
        even on the very first run.

        What
        ----
        Returns the stored entry by reference. When :attr:`current_context` does
        not name an entry, an empty one is inserted under it, or under
        :data:`DEFAULT_CONTEXT_KEY` when :attr:`current_context` is empty. The
        new entry is invalid, so downstream validation still fails.

        Side Effects
        ------------
        May set :attr:`current_context` and insert into :attr:`contexts`.
        """

        if self.contexts is None:
            self.contexts = {}

        existing = self.contexts.get(self.current_context)
        if existing is not None:
            return existing

        if not self.current_context:
            self.current_context = DEFAULT_CONTEXT_KEY

        cfg = ClientConfiguration()
        self.contexts[self.current_context] = cfg
        return cfg

    def set_current(self, name: str) -> None:
        """Point :attr:`current_context` at *name* without checking it exists."""

        self.current_context = name

    def current_context_exists(self) -> bool:
        return self.current_context in self.contexts

    def remove_context(self, name: str) -> bool:
        """Remove context *name* unless that would strand the current pointer.

        Why
        ----
        Deleting the current context must never leave the configuration pointing
        at nothing with no usable alternative.

        What
        ----
        * Unknown *name*: nothing happens, returns ``False``.
        * *name* is not current: removed, returns ``True``.
        * *name* is current: the first other valid context (iteration order)
          becomes current and *name* is removed; without such a context the
          removal is refused and ``False`` is returned with nothing changed.

        Examples
        --------
        >>> cfg = Configuration("a", {"a": ClientConfiguration(host="h", token="t")})
        >>> cfg.remove_context("a"), list(cfg.contexts)
        (False, ['a'])
        """

        if name not in self.contexts:
            return False

        if self.current_context == name:
            replacement = next(
                (other for other, cfg in self.contexts.items() if other != name and cfg.is_valid()),
                None,
            )
            if replacement is None:
                return False
            self.set_current(replacement)

        del self.contexts[name]
        return True

    def clone(self) -> Configuration:
        """Return a deep copy whose mutations never reach this instance."""

        return Configuration(
            current_context=self.current_context,
            contexts={name: cfg.copy() for name, cfg in self.contexts.items()},
        )

    def fill_current(self, other: ClientConfiguration) -> bool:
        """Merge *other* into the current context.

        Why
        ----
        Seeding a brand-new slot with an incomplete record would produce a
        context that can never connect, so a missing slot only adopts *other*
        when *other* is valid on its own.

        Returns
        -------
        bool
            Validity of the current context afterwards; ``False`` when the slot
            is still missing.
        """

        if self.contexts is None:
            self.contexts = {}

        existing = self.contexts.get(self.current_context)
        if existing is None:
            if not other.is_valid():
                return False
            self.contexts[self.current_context] = other.copy()
            return True
        return existing.fill(other)

    def remove_tokens(self) -> None:
        """Clear the token of every context so the next connection logs in again."""

        for cfg in self.contexts.values():
            cfg.token = ""

    def format_hosts(self) -> None:
        for cfg in self.contexts.values():
            cfg.format_host()

    def __iter__(self) -> Iterator[tuple[str, ClientConfiguration]]:
        return iter(self.contexts.items())


__all__ = ["ClientConfiguration", "Configuration", "DEFAULT_CONTEXT_KEY", "format_host"]
