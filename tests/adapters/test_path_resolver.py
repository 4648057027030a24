"""Path resolver adapter tests exercising home and search-root discovery.

Shared sandbox fixtures (``tests.support``) keep the setup declarative and
point the home config directory at ``tmp_path`` via ``LENSES_CONFIG_DIR``.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lenses_config.adapters.path_resolvers.default import (
    CONFIG_DIR_ENV,
    CONFIGURATION_FILENAMES,
    DefaultPathResolver,
    candidate_paths,
    home_dir,
)
from lenses_config.domain.errors import NotFound
from tests.support import create_config_sandbox


def test_roots_follow_home_executable_cwd_order(tmp_path: Path) -> None:
    sandbox = create_config_sandbox(tmp_path)
    roots = list(sandbox.resolver().roots())
    assert roots == [sandbox.roots["home"], sandbox.roots["bin"].resolve(), sandbox.roots["cwd"]]


def test_roots_are_deduplicated(tmp_path: Path) -> None:
    sandbox = create_config_sandbox(tmp_path)
    resolver = DefaultPathResolver(
        cwd=sandbox.roots["bin"],
        executable=sandbox.executable,
        env=sandbox.env,
    )
    roots = list(resolver.roots())
    assert len(roots) == 2
    assert roots[0] == sandbox.roots["home"]


def test_config_home_defaults_under_home_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_DIR_ENV, raising=False)
    resolver = DefaultPathResolver(
        cwd=tmp_path,
        executable=tmp_path / "lenses-config",
        env={"HOME": str(tmp_path / "alice")},
        platform="linux",
        user_home=lambda: "",
    )
    assert resolver.config_home() == tmp_path / "alice" / ".lenses"


def test_config_dir_override_wins_over_home(tmp_path: Path) -> None:
    resolver = DefaultPathResolver(
        cwd=tmp_path,
        executable=tmp_path / "lenses-config",
        env={CONFIG_DIR_ENV: str(tmp_path / "custom"), "HOME": str(tmp_path / "alice")},
        user_home=lambda: str(tmp_path / "record"),
    )
    assert resolver.config_home() == tmp_path / "custom"


def test_unresolvable_home_raises_not_found(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (CONFIG_DIR_ENV, "HOME", "HOMEDRIVE", "HOMEPATH", "USERPROFILE"):
        monkeypatch.delenv(key, raising=False)
    resolver = DefaultPathResolver(
        cwd=tmp_path / "cwd",
        executable=tmp_path / "bin" / "lenses-config",
        platform="linux",
        user_home=lambda: "",
    )
    with pytest.raises(NotFound):
        resolver.config_home()
    assert [root.name for root in resolver.roots()] == ["bin", "cwd"]


def test_user_record_takes_precedence_over_home_variable() -> None:
    assert home_dir(env={"HOME": "/env"}, platform="linux", user_home=lambda: "/record") == "/record"


@pytest.mark.parametrize(
    ("platform", "env", "expected"),
    [
        ("linux", {"HOME": "/home/demo"}, "/home/demo"),
        ("plan9", {"home": "/usr/glenda"}, "/usr/glenda"),
        ("linux", {"home": "/usr/glenda"}, ""),
        ("win32", {"HOMEDRIVE": "D:", "HOMEPATH": "\\demo"}, "D:\\demo"),
        ("win32", {"USERPROFILE": "C:\\Users\\demo"}, "C:\\Users\\demo"),
        ("darwin", {"USERPROFILE": "C:\\Users\\demo"}, ""),
    ],
)
def test_home_dir_fallback_chain(platform: str, env: dict[str, str], expected: str) -> None:
    assert home_dir(env=env, platform=platform, user_home=lambda: "") == expected


def test_candidate_paths_cover_every_filename_in_order(tmp_path: Path) -> None:
    paths = list(candidate_paths(tmp_path))
    assert [path.name for path in paths] == list(CONFIGURATION_FILENAMES)
    assert len(paths) == 12
    assert all(path.parent == tmp_path for path in paths)
