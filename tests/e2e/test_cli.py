"""End-to-end CLI coverage for the public commands exposed by lenses_config.

These tests run the commands against a sandboxed home directory so the search
order and the persisted file can be asserted without touching the real user
configuration.
"""

from __future__ import annotations

import json
from pathlib import Path

import lib_cli_exit_tools
import pytest
import yaml
from click.testing import CliRunner

from lenses_config import cli
from lenses_config.domain.errors import InvalidFormat, NotFound, ValidationError
from tests.support import MINIMAL_YAML, ConfigSandbox, create_config_sandbox

TWO_CONTEXTS = """CurrentContext: dev
Contexts:
  dev:
    Host: "dev:443"
    Token: dev-token
  prod:
    Host: http://prod
    BasicAuthentication:
      Username: admin
      Password: secret
"""


def _runner() -> CliRunner:
    """Return a fresh CLI runner so each test starts from a clean state."""

    return CliRunner()


@pytest.fixture()
def sandbox(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigSandbox:
    created = create_config_sandbox(tmp_path)
    created.apply_env(monkeypatch)
    return created


def _saved(sandbox: ConfigSandbox, filename: str = "lenses-cli.yml") -> dict:
    return yaml.safe_load((sandbox.roots["home"] / filename).read_text(encoding="utf-8"))


def test_cli_contexts_lists_every_context_masked(sandbox: ConfigSandbox) -> None:
    """`contexts` should report validity per context and never print secrets."""

    sandbox.write("home", "lenses.yml", content=TWO_CONTEXTS)
    result = _runner().invoke(cli.cli, ["contexts"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [(entry["name"], entry["current"], entry["valid"]) for entry in payload] == [
        ("dev", True, True),
        ("prod", False, True),
    ]
    assert payload[0]["host"] == "https://dev:443"
    assert "secret" not in result.output
    assert "dev-token" not in result.output


def test_cli_context_applies_flag_overrides(sandbox: ConfigSandbox) -> None:
    """Global flags override the file for the invocation but are not saved."""

    path = sandbox.write("home", "lenses.yml", content=TWO_CONTEXTS)
    result = _runner().invoke(cli.cli, ["--host", "other:9991", "--timeout", "30s", "context"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["name"] == "dev"
    assert payload["host"] == "http://other:9991"
    assert payload["timeout"] == "30s"
    assert path.read_text(encoding="utf-8") == TWO_CONTEXTS


def test_cli_context_switch_via_global_option(sandbox: ConfigSandbox) -> None:
    sandbox.write("home", "lenses.yml", content=TWO_CONTEXTS)
    result = _runner().invoke(cli.cli, ["--context", "prod", "context"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["name"] == "prod"
    assert payload["host"] == "http://prod:80"
    assert payload["authentication"]["password"] == "****"


def test_cli_unknown_global_context_fails(sandbox: ConfigSandbox) -> None:
    sandbox.write("home", "lenses.yml", content=TWO_CONTEXTS)
    result = _runner().invoke(cli.cli, ["--context", "ghost", "contexts"])
    assert result.exit_code != 0
    assert isinstance(result.exception, NotFound)


def test_cli_context_without_configuration_fails_validation(sandbox: ConfigSandbox) -> None:
    result = _runner().invoke(cli.cli, ["context"])
    assert result.exit_code != 0
    assert isinstance(result.exception, ValidationError)


def test_cli_use_context_persists_switch(sandbox: ConfigSandbox) -> None:
    sandbox.write("home", "lenses.yml", content=TWO_CONTEXTS)
    result = _runner().invoke(cli.cli, ["use-context", "prod"])
    assert result.exit_code == 0, result.output
    saved = _saved(sandbox, "lenses.yml")
    assert saved["CurrentContext"] == "prod"
    assert saved["Contexts"]["prod"]["Host"] == "http://prod:80"


def test_cli_remove_current_context_switches(sandbox: ConfigSandbox) -> None:
    sandbox.write("home", "lenses.yml", content=TWO_CONTEXTS)
    result = _runner().invoke(cli.cli, ["remove-context", "dev"])
    assert result.exit_code == 0, result.output
    saved = _saved(sandbox, "lenses.yml")
    assert saved["CurrentContext"] == "prod"
    assert list(saved["Contexts"]) == ["prod"]


def test_cli_remove_sole_context_is_refused(sandbox: ConfigSandbox) -> None:
    path = sandbox.write("home", "lenses.yml", content=MINIMAL_YAML)
    result = _runner().invoke(cli.cli, ["remove-context", "master"])
    assert result.exit_code != 0
    assert path.read_text(encoding="utf-8") == MINIMAL_YAML


def test_cli_remove_unknown_context_fails(sandbox: ConfigSandbox) -> None:
    sandbox.write("home", "lenses.yml", content=MINIMAL_YAML)
    result = _runner().invoke(cli.cli, ["remove-context", "ghost"])
    assert result.exit_code != 0


def test_cli_configure_creates_first_configuration(sandbox: ConfigSandbox) -> None:
    """Without any file, `configure` seeds ``master`` and writes the default file."""

    result = _runner().invoke(
        cli.cli,
        ["configure", "--host", "lenses:443", "--user", "admin", "--password", "admin"],
    )
    assert result.exit_code == 0, result.output
    saved = _saved(sandbox)
    assert saved["CurrentContext"] == "master"
    master = saved["Contexts"]["master"]
    assert master["Host"] == "https://lenses:443"
    assert master["BasicAuthentication"] == {"Username": "admin", "Password": "admin"}


def test_cli_configure_adds_kerberos_context(sandbox: ConfigSandbox) -> None:
    sandbox.write("home", "lenses.yml", content=MINIMAL_YAML)
    result = _runner().invoke(
        cli.cli,
        [
            "configure",
            "--context",
            "kerb",
            "--host",
            "http://kerb",
            "--kerberos-conf",
            "/etc/krb5.conf",
            "--kerberos-keytab",
            "/etc/lenses.keytab",
        ],
    )
    assert result.exit_code == 0, result.output
    saved = _saved(sandbox, "lenses.yml")
    assert saved["CurrentContext"] == "kerb"
    assert set(saved["Contexts"]) == {"master", "kerb"}
    kerberos = saved["Contexts"]["kerb"]["KerberosAuthentication"]
    assert kerberos == {"ConfFile": "/etc/krb5.conf", "WithKeytab": {"KeytabFile": "/etc/lenses.keytab"}}


def test_cli_configure_rejects_incomplete_context(sandbox: ConfigSandbox) -> None:
    path = sandbox.write("home", "lenses.yml", content=MINIMAL_YAML)
    result = _runner().invoke(cli.cli, ["configure", "--context", "half", "--host", "half:443"])
    assert result.exit_code != 0
    assert isinstance(result.exception, ValidationError)
    assert path.read_text(encoding="utf-8") == MINIMAL_YAML


def test_cli_configure_rejects_two_kerberos_methods(sandbox: ConfigSandbox) -> None:
    result = _runner().invoke(
        cli.cli,
        ["configure", "--host", "h", "--kerberos-keytab", "/k", "--kerberos-ccache", "/c"],
    )
    assert result.exit_code == 2


def test_cli_clear_tokens(sandbox: ConfigSandbox) -> None:
    sandbox.write("home", "lenses.yml", content=TWO_CONTEXTS)
    result = _runner().invoke(cli.cli, ["clear-tokens"])
    assert result.exit_code == 0, result.output
    saved = _saved(sandbox, "lenses.yml")
    assert saved["Contexts"]["dev"]["Token"] == ""


def test_cli_info_handles_missing_metadata(sandbox: ConfigSandbox, monkeypatch: pytest.MonkeyPatch) -> None:
    """`cli info` must degrade gracefully when package metadata is unavailable."""

    def _raise_pkg_not_found(*_args, **_kwargs):
        raise cli.metadata.PackageNotFoundError()

    monkeypatch.setattr(cli.metadata, "metadata", _raise_pkg_not_found)
    result = _runner().invoke(cli.cli, ["info"])
    assert result.exit_code == 0
    assert "metadata unavailable" in result.output


def test_cli_main_restores_traceback_flag(sandbox: ConfigSandbox) -> None:
    """`cli main` should restore lib_cli_exit_tools tracebacks after execution."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    sandbox.write("home", "lenses.yml", content=MINIMAL_YAML)
    exit_code = cli.main(["--traceback", "contexts"], restore_traceback=True)
    assert exit_code == 0
    assert getattr(lib_cli_exit_tools.config, "traceback", False) == previous_traceback


def test_cli_configure_replaces_broken_file(sandbox: ConfigSandbox) -> None:
    """`configure` is the way out of a file that no longer decodes."""

    broken = sandbox.write("home", "lenses.yml", content="Contexts: [not, a, mapping\n")
    result = _runner().invoke(cli.cli, ["configure", "--host", "x:443", "--token", "t"])
    assert result.exit_code == 0, result.output
    saved = yaml.safe_load(broken.read_text(encoding="utf-8"))
    assert saved["CurrentContext"] == "master"
    assert saved["Contexts"]["master"]["Host"] == "https://x:443"


def test_cli_other_commands_still_report_broken_file(sandbox: ConfigSandbox) -> None:
    sandbox.write("home", "lenses.yml", content="Contexts: [not, a, mapping\n")
    result = _runner().invoke(cli.cli, ["contexts"])
    assert result.exit_code != 0
    assert isinstance(result.exception, InvalidFormat)
