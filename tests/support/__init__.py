"""Shared sandbox for tests that touch the configuration search roots.

The sandbox creates the three search roots (home config directory, executable
directory, working directory) under ``tmp_path`` and exposes the environment
overrides that make :class:`DefaultPathResolver` use them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from lenses_config.adapters.path_resolvers.default import CONFIG_DIR_ENV, DefaultPathResolver

LOCATIONS = ("home", "bin", "cwd")

MINIMAL_YAML = """CurrentContext: master
Contexts:
  master:
    Host: "x:443"
    BasicAuthentication:
      Username: admin
      Password: admin
"""

MINIMAL_JSON = """{
  "currentContext": "master",
  "contexts": {
    "master": {
      "host": "x:443",
      "basic_authentication": {"username": "admin", "password": "admin"}
    }
  }
}
"""


@dataclass
class ConfigSandbox:
    """Temporary search roots plus the env overrides pointing at them."""

    roots: dict[str, Path]
    env: dict[str, str] = field(default_factory=dict)

    @property
    def executable(self) -> Path:
        return self.roots["bin"] / "lenses-config"

    def resolver(self) -> DefaultPathResolver:
        return DefaultPathResolver(cwd=self.roots["cwd"], executable=self.executable, env=self.env)

    def write(self, location: str, filename: str, *, content: str) -> Path:
        target = self.roots[location] / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    def apply_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Point the real process at the sandbox (env vars and working directory)."""

        for key, value in self.env.items():
            monkeypatch.setenv(key, value)
        monkeypatch.chdir(self.roots["cwd"])


def create_config_sandbox(tmp_path: Path) -> ConfigSandbox:
    roots = {location: tmp_path / location for location in LOCATIONS}
    for path in roots.values():
        path.mkdir(parents=True, exist_ok=True)
    return ConfigSandbox(roots=roots, env={CONFIG_DIR_ENV: str(roots["home"])})


__all__ = ["ConfigSandbox", "LOCATIONS", "MINIMAL_JSON", "MINIMAL_YAML", "create_config_sandbox"]
