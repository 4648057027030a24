"""CLI adapter for ``lenses_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose context management (list, show, switch, remove, configure) on the
command line so operators can inspect and repair their connection settings
without writing Python. Output is plain JSON; nothing here prompts or talks to
the remote service.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command: loads the configuration once and collects the
  global override flags.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_contexts` / :func:`cli_context` – inspect contexts.
* :func:`cli_use_context` / :func:`cli_remove_context` – switch or delete.
* :func:`cli_configure` – non-interactive configuration via options.
* :func:`cli_clear_tokens` – force a fresh login on the next connection.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It owns one
:class:`~lenses_config.core.ConfigurationResolver` per invocation and passes it
to subcommands through the Click context object. ``lib_cli_exit_tools``
centralises the exit code strategy.
"""

from __future__ import annotations

import json
import sys
import uuid
from importlib import metadata
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import ConfigurationResolver
from .domain.authentication import (
    Authentication,
    BasicAuthentication,
    KerberosAuthentication,
    KerberosFromCCache,
    KerberosMethod,
    KerberosWithKeytab,
    KerberosWithPassword,
)
from .domain.config import DEFAULT_CONTEXT_KEY, ClientConfiguration, Configuration
from .domain.errors import ValidationError
from .application.merge import fill_layers
from .observability import bind_trace_id

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_DIST_NAME: Final[str] = "lenses_config"


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _connection_options(func):
    """Attach the connection setting options shared by the root and ``configure``."""

    options = [
        click.option("--host", default=None, help="Service address, e.g. https://lenses:443"),
        click.option("--token", default=None, help="Access token; overrides any credentials"),
        click.option("--user", default=None, help="Username for basic or Kerberos password login"),
        click.option("--password", default=None, help="Password for basic or Kerberos password login"),
        click.option("--timeout", default=None, help="Connection timeout such as 30s or 1m30s"),
        click.option("--debug/--no-debug", default=None, help="Toggle verbose diagnostics for the context"),
        click.option("--kerberos-conf", default=None, help="Path to krb5.conf; switches to Kerberos login"),
        click.option("--kerberos-realm", default=None, help="Kerberos realm for password login"),
        click.option("--kerberos-keytab", default=None, help="Kerberos keytab file"),
        click.option("--kerberos-ccache", default=None, help="Kerberos credentials cache file"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group(
    help="Manage Lenses connection contexts",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=_DIST_NAME,
    message="lenses_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.option("--context", "context_name", default=None, help="Use this context instead of the current one")
@_connection_options
@click.pass_context
def cli(ctx: click.Context, traceback: bool, context_name: Optional[str], **settings: Any) -> None:
    """Root command: load the configuration and collect flag overrides.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and binds a fresh trace
        identifier for the invocation.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    bind_trace_id(uuid.uuid4().hex)

    resolver = ConfigurationResolver()
    # configure must be able to replace a file that no longer decodes
    resolver.load(discard_invalid=ctx.invoked_subcommand == "configure")
    if context_name:
        resolver.use_context(context_name)

    ctx.obj["resolver"] = resolver
    ctx.obj["overrides"] = [("flags", _settings_layer(resolver.configuration, settings))]


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(_DIST_NAME)
    except metadata.PackageNotFoundError:
        click.echo(f"{_DIST_NAME} (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', _DIST_NAME)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("contexts", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
@click.pass_obj
def cli_contexts(obj: dict[str, Any], indent: Optional[int]) -> None:
    """List every context with its validity; secrets are masked."""

    configuration: Configuration = obj["resolver"].configuration
    payload = [
        {
            "name": name,
            "current": name == configuration.current_context,
            "valid": cfg.is_valid(),
            **cfg.describe(),
        }
        for name, cfg in configuration
    ]
    click.echo(json.dumps(payload, indent=indent))


@cli.command("context", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
@click.pass_obj
def cli_context(obj: dict[str, Any], indent: Optional[int]) -> None:
    """Show the current context after flag overrides are applied.

    Fails with a validation message when the configuration cannot be used to
    connect.
    """

    resolver: ConfigurationResolver = obj["resolver"]
    resolver.apply_overrides(obj["overrides"])
    current = resolver.validate()
    payload = {"name": resolver.configuration.current_context, **current.describe()}
    click.echo(json.dumps(payload, indent=indent))


@cli.command("use-context", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("name")
@click.pass_obj
def cli_use_context(obj: dict[str, Any], name: str) -> None:
    """Make NAME the current context and save."""

    resolver: ConfigurationResolver = obj["resolver"]
    resolver.use_context(name)
    path = resolver.save()
    click.echo(f"Current context is now '{name}' ({path})")


@cli.command("remove-context", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("name")
@click.pass_obj
def cli_remove_context(obj: dict[str, Any], name: str) -> None:
    """Delete context NAME and save.

    Removing the current context is refused unless another valid context can
    take its place.
    """

    resolver: ConfigurationResolver = obj["resolver"]
    if name not in resolver.configuration.contexts:
        raise click.ClickException(f"Context '{name}' does not exist")
    if not resolver.remove_context(name):
        raise click.ClickException(
            f"Cannot remove context '{name}': no other valid context can become current"
        )
    resolver.save()
    click.echo(f"Removed context '{name}'; current context is '{resolver.configuration.current_context}'")


@cli.command("configure", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--context", "context_name", default=None, help="Context to create or update (defaults to current)")
@_connection_options
@click.pass_obj
def cli_configure(obj: dict[str, Any], context_name: Optional[str], **settings: Any) -> None:
    """Create or update a context from options, validate it, and save.

    Edits are made on a copy; the saved file only changes when the whole
    configuration is valid afterwards.
    """

    resolver: ConfigurationResolver = obj["resolver"]
    staged = resolver.stage()
    if context_name:
        staged.set_current(context_name)
    elif not staged.current_context:
        staged.set_current(DEFAULT_CONTEXT_KEY)

    layers = [*obj["overrides"], ("configure", _settings_layer(staged, settings))]
    if not fill_layers(staged, layers):
        raise ValidationError(
            f"Context '{staged.current_context}' needs a host and either a token or credentials"
        )
    resolver.commit(staged)
    resolver.validate()
    path = resolver.save()
    click.echo(f"Saved context '{staged.current_context}' to {path}")


@cli.command("clear-tokens", context_settings=CLICK_CONTEXT_SETTINGS)
@click.pass_obj
def cli_clear_tokens(obj: dict[str, Any]) -> None:
    """Remove stored tokens from every context and save."""

    resolver: ConfigurationResolver = obj["resolver"]
    resolver.configuration.remove_tokens()
    path = resolver.save()
    click.echo(f"Cleared tokens in {path}")


def _settings_layer(configuration: Configuration, settings: dict[str, Any]) -> ClientConfiguration:
    """Translate option values into a partial :class:`ClientConfiguration`.

    ``debug`` keeps the current context's value unless an explicit flag was
    given, because :meth:`ClientConfiguration.fill` copies it whenever it differs.
    """

    debug = settings.get("debug")
    if debug is None:
        existing = configuration.contexts.get(configuration.current_context)
        debug = existing.debug if existing is not None else False
    return ClientConfiguration(
        host=settings.get("host") or "",
        authentication=_authentication_from(settings),
        token=settings.get("token") or "",
        timeout=settings.get("timeout") or "",
        debug=debug,
    )


def _authentication_from(settings: dict[str, Any]) -> Optional[Authentication]:
    user = settings.get("user") or ""
    password = settings.get("password") or ""
    conf_file = settings.get("kerberos_conf") or ""
    keytab = settings.get("kerberos_keytab") or ""
    ccache = settings.get("kerberos_ccache") or ""
    realm = settings.get("kerberos_realm") or ""

    if keytab and ccache:
        raise click.UsageError("--kerberos-keytab and --kerberos-ccache are mutually exclusive")
    if conf_file or keytab or ccache or realm:
        method: Optional[KerberosMethod]
        if keytab:
            method = KerberosWithKeytab(keytab_file=keytab)
        elif ccache:
            method = KerberosFromCCache(ccache_file=ccache)
        elif user or password:
            method = KerberosWithPassword(username=user, password=password, realm=realm)
        else:
            method = None
        return KerberosAuthentication(conf_file=conf_file, method=method)
    if user or password:
        return BasicAuthentication(username=user, password=password)
    return None


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=_DIST_NAME,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
