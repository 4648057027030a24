"""Application-layer override policy.

Purpose
-------
Apply partial connection settings from several sources (command line flags,
interactive answers, programmatic overrides) on top of the configuration that
was read from disk, lowest precedence first. The module is free of I/O.

Contents
    - ``fill_layers``: public entry point driven by a simple loop.
    - ``changed_fields``: names the fields a layer would change, for logging.

System Role
-----------
Called by :meth:`lenses_config.core.ConfigurationResolver.apply_overrides`.
Each layer goes through :meth:`Configuration.fill_current`, so a missing current
slot is only seeded by a layer that is valid on its own.
"""

from __future__ import annotations

from typing import Iterable

from ..domain.config import ClientConfiguration, Configuration
from ..observability import log_debug, make_event


def fill_layers(
    configuration: Configuration,
    layers: Iterable[tuple[str, ClientConfiguration]],
) -> bool:
    """Merge override *layers* into the current context of *configuration*.

    Parameters
    ----------
    configuration:
        Configuration whose current context receives the overrides (mutated).
    layers:
        ``(source_name, partial_configuration)`` tuples ordered from lowest to
        highest precedence.

    Returns
    -------
    bool
        Validity of the current context after the last layer; ``False`` when no
        layer could seed a missing current context.

    Examples
    --------
    >>> from lenses_config.domain.authentication import BasicAuthentication
    >>> cfg = Configuration("dev", {"dev": ClientConfiguration(host="http://a:80")})
    >>> fill_layers(cfg, [
    ...     ("flags", ClientConfiguration(timeout="5s")),
    ...     ("prompt", ClientConfiguration(authentication=BasicAuthentication("u", "p"))),
    ... ])
    True
    >>> cfg.contexts["dev"].timeout
    '5s'
    """

    current = configuration.contexts.get(configuration.current_context)
    valid = current.is_valid() if current is not None else False
    for source, layer in layers:
        existing = configuration.contexts.get(configuration.current_context)
        fields = changed_fields(existing, layer)
        valid = configuration.fill_current(layer)
        if existing is None and not configuration.current_context_exists():
            fields = []
        log_debug(
            "override_applied",
            **make_event(configuration.current_context, None, {"source": source, "fields": fields, "valid": valid}),
        )
    return valid


def changed_fields(target: ClientConfiguration | None, layer: ClientConfiguration) -> list[str]:
    """Return the fields :meth:`ClientConfiguration.fill` would change.

    Examples
    --------
    >>> changed_fields(ClientConfiguration(host="a"), ClientConfiguration(host="b", debug=True))
    ['host', 'debug']
    >>> changed_fields(None, ClientConfiguration(host="b"))
    ['host']
    """

    base = target if target is not None else ClientConfiguration()
    fields: list[str] = []
    for name in ("host", "token", "timeout"):
        value = getattr(layer, name)
        if value and value != getattr(base, name):
            fields.append(name)
    if layer.authentication is not None:
        fields.append("authentication")
    if layer.debug != base.debug:
        fields.append("debug")
    return fields
