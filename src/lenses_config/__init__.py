"""Public package surface for ``lenses_config``.

Re-exports the domain model, the error taxonomy, the lookup and persistence
helpers, and the logging hooks so callers can write
``from lenses_config import ConfigurationResolver`` without knowing the
internal layering.
"""

from __future__ import annotations

from .core import (
    ConfigurationResolver,
    LocatedConfiguration,
    codec_for_path,
    locate_configuration,
    lookup_configuration,
    read_configuration_from_file,
    try_read_configuration_from_file,
    write_configuration,
)
from .adapters.codecs.structured import DEFAULT_CODECS, JSONCodec, YAMLCodec
from .adapters.path_resolvers.default import CONFIGURATION_FILENAMES, DefaultPathResolver, home_dir
from .domain.authentication import (
    Authentication,
    BasicAuthentication,
    KerberosAuthentication,
    KerberosFromCCache,
    KerberosWithKeytab,
    KerberosWithPassword,
)
from .domain.config import DEFAULT_CONTEXT_KEY, ClientConfiguration, Configuration, format_host
from .domain.errors import ConfigError, InvalidFormat, NotFound, ValidationError
from .observability import bind_trace_id, get_logger

__all__ = [
    "Authentication",
    "BasicAuthentication",
    "CONFIGURATION_FILENAMES",
    "ClientConfiguration",
    "ConfigError",
    "Configuration",
    "ConfigurationResolver",
    "DEFAULT_CODECS",
    "DEFAULT_CONTEXT_KEY",
    "DefaultPathResolver",
    "InvalidFormat",
    "JSONCodec",
    "KerberosAuthentication",
    "KerberosFromCCache",
    "KerberosWithKeytab",
    "KerberosWithPassword",
    "LocatedConfiguration",
    "NotFound",
    "ValidationError",
    "YAMLCodec",
    "bind_trace_id",
    "codec_for_path",
    "format_host",
    "get_logger",
    "home_dir",
    "locate_configuration",
    "lookup_configuration",
    "read_configuration_from_file",
    "try_read_configuration_from_file",
    "write_configuration",
]
