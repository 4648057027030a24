"""Structured configuration codecs.

Purpose
-------
Convert between the :class:`~lenses_config.domain.config.Configuration` model
and its two on-disk encodings. Adapters are small wrappers around ``json`` and
PyYAML (a ``SafeLoader`` subclass and ``safe_dump``) so error handling and
observability live in one place.

Contents
--------
* :class:`DocumentKeys` – key names one format uses on the wire.
* :class:`BaseCodec` – shared mapping <-> model translation.
* :class:`JSONCodec` – ``currentContext`` / ``basic_authentication`` style keys.
* :class:`YAMLCodec` – ``CurrentContext`` / ``BasicAuthentication`` style keys.
* :data:`DEFAULT_CODECS` – the order the locator tries formats in.

System Role
-----------
Used by :func:`lenses_config.core.lookup_configuration` to decode candidate
files and by :func:`lenses_config.core.write_configuration` to persist. The
authentication slot is written under a kind-specific key and rebuilt from that
key, never decoded generically.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

import yaml

from ...domain.authentication import (
    Authentication,
    BasicAuthentication,
    KerberosAuthentication,
    KerberosFromCCache,
    KerberosMethod,
    KerberosWithKeytab,
    KerberosWithPassword,
)
from ...domain.config import ClientConfiguration, Configuration
from ...domain.errors import InvalidFormat
from ...observability import log_debug

_IN_MEMORY: Final[str] = "<memory>"
_NUMERIC_TAGS: Final[frozenset[str]] = frozenset({"tag:yaml.org,2002:int", "tag:yaml.org,2002:float"})


@dataclass(frozen=True, slots=True)
class DocumentKeys:
    """Wire-level key names for one serialisation format."""

    current_context: str
    contexts: str
    host: str
    token: str
    timeout: str
    debug: str
    basic: str
    kerberos: str
    username: str
    password: str
    realm: str
    conf_file: str
    with_password: str
    with_keytab: str
    keytab_file: str
    from_ccache: str
    ccache_file: str


JSON_KEYS: Final[DocumentKeys] = DocumentKeys(
    current_context="currentContext",
    contexts="contexts",
    host="host",
    token="token",
    timeout="timeout",
    debug="debug",
    basic="basic_authentication",
    kerberos="kerberos_authentication",
    username="username",
    password="password",
    realm="realm",
    conf_file="confFile",
    with_password="with_password",
    with_keytab="with_keytab",
    keytab_file="keytab",
    from_ccache="from_ccache",
    ccache_file="ccache",
)

YAML_KEYS: Final[DocumentKeys] = DocumentKeys(
    current_context="CurrentContext",
    contexts="Contexts",
    host="Host",
    token="Token",
    timeout="Timeout",
    debug="Debug",
    basic="BasicAuthentication",
    kerberos="KerberosAuthentication",
    username="Username",
    password="Password",
    realm="Realm",
    conf_file="ConfFile",
    with_password="WithPassword",
    with_keytab="WithKeytab",
    keytab_file="KeytabFile",
    from_ccache="FromCCache",
    ccache_file="CCacheFile",
)


class BaseCodec:
    """Translate parsed documents into the domain model and back.

    Subclasses provide :attr:`name`, :attr:`keys`, ``_parse`` and ``_dump``;
    everything format-independent lives here.
    """

    name: str = ""
    keys: DocumentKeys
    omit_empty: bool = False

    def decode(self, payload: bytes, *, path: str = _IN_MEMORY) -> Configuration:
        """Return the :class:`Configuration` encoded in *payload*.

        Raises
        ------
        InvalidFormat
            When *payload* does not parse, is not a mapping, lacks the contexts
            key, or holds an unrecognised authentication shape.
        """

        data = self._parse(payload, path=path)
        document = self._ensure_mapping(data, path=path, where="document")
        configuration = self._configuration_from(document, path=path)
        log_debug(
            "config_file_decoded",
            layer="codec",
            path=path,
            format=self.name,
            contexts=len(configuration.contexts),
        )
        return configuration

    def encode(self, configuration: Configuration) -> bytes:
        """Return *configuration* serialised in this codec's format."""

        return self._dump(self._document_from(configuration))

    def _parse(self, payload: bytes, *, path: str) -> object:  # pragma: no cover - abstract
        raise NotImplementedError

    def _dump(self, document: dict[str, Any]) -> bytes:  # pragma: no cover - abstract
        raise NotImplementedError

    @staticmethod
    def _ensure_mapping(data: object, *, path: str, where: str) -> Mapping[str, Any]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseCodec._ensure_mapping({"key": 1}, path="demo", where="document")
        {'key': 1}
        >>> BaseCodec._ensure_mapping(42, path="demo", where="document")
        Traceback (most recent call last):
        ...
        lenses_config.domain.errors.InvalidFormat: File demo: document is not a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path}: {where} is not a mapping")
        return data

    def _configuration_from(self, document: Mapping[str, Any], *, path: str) -> Configuration:
        keys = self.keys
        if keys.contexts not in document:
            raise InvalidFormat(f"File {path}: missing '{keys.contexts}' key for {self.name} documents")

        current = _string(document.get(keys.current_context), path=path, where=keys.current_context)
        raw_contexts = document.get(keys.contexts)
        if raw_contexts is None:
            raw_contexts = {}
        contexts_map = self._ensure_mapping(raw_contexts, path=path, where=keys.contexts)

        contexts: dict[str, ClientConfiguration] = {}
        for name, raw in contexts_map.items():
            contexts[str(name)] = self._client_from(raw, path=path, where=f"{keys.contexts}.{name}")
        return Configuration(current_context=current, contexts=contexts)

    def _client_from(self, raw: object, *, path: str, where: str) -> ClientConfiguration:
        if raw is None:
            return ClientConfiguration()
        keys = self.keys
        entry = self._ensure_mapping(raw, path=path, where=where)
        return ClientConfiguration(
            host=_string(entry.get(keys.host), path=path, where=f"{where}.{keys.host}"),
            authentication=self._authentication_from(entry, path=path, where=where),
            token=_string(entry.get(keys.token), path=path, where=f"{where}.{keys.token}"),
            timeout=_string(entry.get(keys.timeout), path=path, where=f"{where}.{keys.timeout}"),
            debug=_boolean(entry.get(keys.debug), path=path, where=f"{where}.{keys.debug}"),
        )

    def _authentication_from(self, entry: Mapping[str, Any], *, path: str, where: str) -> Authentication | None:
        keys = self.keys
        present = [key for key in (keys.basic, keys.kerberos) if entry.get(key) is not None]
        if not present:
            return None
        if len(present) > 1:
            raise InvalidFormat(f"File {path}: {where} declares more than one authentication ({', '.join(present)})")

        kind = present[0]
        block = self._ensure_mapping(entry[kind], path=path, where=f"{where}.{kind}")
        location = f"{where}.{kind}"
        if kind == keys.basic:
            return BasicAuthentication(
                username=_string(block.get(keys.username), path=path, where=f"{location}.{keys.username}"),
                password=_string(block.get(keys.password), path=path, where=f"{location}.{keys.password}"),
            )
        return KerberosAuthentication(
            conf_file=_string(block.get(keys.conf_file), path=path, where=f"{location}.{keys.conf_file}"),
            method=self._kerberos_method_from(block, path=path, where=location),
        )

    def _kerberos_method_from(self, block: Mapping[str, Any], *, path: str, where: str) -> KerberosMethod | None:
        keys = self.keys
        present = [key for key in (keys.with_password, keys.with_keytab, keys.from_ccache) if block.get(key) is not None]
        if not present:
            return None
        if len(present) > 1:
            raise InvalidFormat(f"File {path}: {where} declares more than one kerberos method ({', '.join(present)})")

        kind = present[0]
        location = f"{where}.{kind}"
        method = self._ensure_mapping(block[kind], path=path, where=location)
        if kind == keys.with_password:
            return KerberosWithPassword(
                username=_string(method.get(keys.username), path=path, where=f"{location}.{keys.username}"),
                password=_string(method.get(keys.password), path=path, where=f"{location}.{keys.password}"),
                realm=_string(method.get(keys.realm), path=path, where=f"{location}.{keys.realm}"),
            )
        if kind == keys.with_keytab:
            return KerberosWithKeytab(
                keytab_file=_string(method.get(keys.keytab_file), path=path, where=f"{location}.{keys.keytab_file}"),
            )
        return KerberosFromCCache(
            ccache_file=_string(method.get(keys.ccache_file), path=path, where=f"{location}.{keys.ccache_file}"),
        )

    def _document_from(self, configuration: Configuration) -> dict[str, Any]:
        keys = self.keys
        return {
            keys.current_context: configuration.current_context,
            keys.contexts: {name: self._client_document(cfg) for name, cfg in configuration.contexts.items()},
        }

    def _client_document(self, cfg: ClientConfiguration) -> dict[str, Any]:
        keys = self.keys
        entry: dict[str, Any] = {keys.host: cfg.host}
        for key, value in ((keys.token, cfg.token), (keys.timeout, cfg.timeout), (keys.debug, cfg.debug)):
            if value or not self.omit_empty:
                entry[key] = value

        auth = cfg.authentication
        if isinstance(auth, BasicAuthentication):
            entry[keys.basic] = {keys.username: auth.username, keys.password: auth.password}
        elif isinstance(auth, KerberosAuthentication):
            entry[keys.kerberos] = self._kerberos_document(auth)
        return entry

    def _kerberos_document(self, auth: KerberosAuthentication) -> dict[str, Any]:
        keys = self.keys
        block: dict[str, Any] = {keys.conf_file: auth.conf_file}
        method = auth.method
        if isinstance(method, KerberosWithPassword):
            block[keys.with_password] = {
                keys.username: method.username,
                keys.password: method.password,
                keys.realm: method.realm,
            }
        elif isinstance(method, KerberosWithKeytab):
            block[keys.with_keytab] = {keys.keytab_file: method.keytab_file}
        elif isinstance(method, KerberosFromCCache):
            block[keys.from_ccache] = {keys.ccache_file: method.ccache_file}
        return block


class JSONCodec(BaseCodec):
    """Encode and decode JSON documents.

    Examples
    --------
    >>> cfg = JSONCodec().decode(b'{"currentContext": "dev", "contexts": {"dev": {"host": "h", "token": "t"}}}')
    >>> cfg.current_context, cfg.contexts["dev"].token
    ('dev', 't')
    """

    name = "json"
    keys = JSON_KEYS
    omit_empty = True

    def _parse(self, payload: bytes, *, path: str) -> object:
        try:
            return json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            log_debug("config_file_invalid", layer="codec", path=path, format=self.name, error=str(exc))
            raise InvalidFormat(f"Invalid JSON in {path}: {exc}") from exc

    def _dump(self, document: dict[str, Any]) -> bytes:
        return (json.dumps(document, indent=2) + "\n").encode("utf-8")


class _TextScalarLoader(yaml.SafeLoader):
    """Safe loader that keeps numeric-looking plain scalars as the text written.

    Hand-edited files often carry unquoted values such as ``Token: 123456`` or
    ``Password: 0042``; every such field is a string in the model.
    """


_TextScalarLoader.yaml_implicit_resolvers = {
    first: [(tag, pattern) for tag, pattern in resolvers if tag not in _NUMERIC_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class YAMLCodec(BaseCodec):
    """Encode and decode YAML documents.

    Examples
    --------
    >>> cfg = YAMLCodec().decode(b"Contexts:\\n  m:\\n    Host: lenses:8080\\n    Token: 0123\\n")
    >>> cfg.contexts["m"].token
    '0123'
    """

    name = "yaml"
    keys = YAML_KEYS

    def _parse(self, payload: bytes, *, path: str) -> object:
        try:
            data = yaml.load(payload, Loader=_TextScalarLoader)  # noqa: S506 - SafeLoader subclass
        except yaml.YAMLError as exc:
            log_debug("config_file_invalid", layer="codec", path=path, format=self.name, error=str(exc))
            raise InvalidFormat(f"Invalid YAML in {path}: {exc}") from exc
        if data is None:
            data = {}
        return data

    def _dump(self, document: dict[str, Any]) -> bytes:
        text = yaml.safe_dump(document, sort_keys=False, default_flow_style=False)
        return text.encode("utf-8")


DEFAULT_CODECS: Final[tuple[BaseCodec, ...]] = (JSONCodec(), YAMLCodec())


def _string(value: object, *, path: str, where: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidFormat(f"File {path}: {where} must be a string, got {type(value).__name__}")
    return value


def _boolean(value: object, *, path: str, where: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidFormat(f"File {path}: {where} must be a boolean, got {type(value).__name__}")
    return value


__all__ = [
    "BaseCodec",
    "DEFAULT_CODECS",
    "DocumentKeys",
    "JSONCodec",
    "JSON_KEYS",
    "YAMLCodec",
    "YAML_KEYS",
]
