"""Shared test fixtures."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from semrel.config import loader


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep system and user configuration files out of every test."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.delenv("SEMREL_CONFIG", raising=False)
    monkeypatch.setattr(loader, "SYSTEM_CONFIG", home / "etc" / "semrel" / "config.toml")


class GitRepo:
    """A throwaway git repository driven through the git executable."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.git("init", "-q")

    def git(self, *args: str) -> str:
        result = subprocess.run(
            [
                "git",
                "-c",
                "user.name=Test",
                "-c",
                "user.email=test@example.com",
                "-c",
                "commit.gpgsign=false",
                "-c",
                "core.hooksPath=/dev/null",
                *args,
            ],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def write(self, relative: str, content: str) -> Path:
        path = self.path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def commit(self, message: str) -> str:
        """Commit everything in the work tree (or nothing) and return the sha."""
        self.git("add", "-A")
        self.git("commit", "-q", "--allow-empty", "-m", message)
        return self.git("rev-parse", "HEAD")

    def release(self, version: str, manifest: str = "Cargo.toml", name: str = "demo", message: str | None = None) -> str:
        """Record ``version`` in a Cargo manifest and commit it as a release."""
        self.write(manifest, cargo_toml(version, name))
        return self.commit(message or f"chore(release): {version}")


def cargo_toml(version: str, name: str = "demo") -> str:
    return f'[package]\nname = "{name}"\nversion = "{version}"\nedition = "2021"\n\n[dependencies]\nserde = {{ version = "1" }}\n'


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
    """An empty git repository."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    return GitRepo(repo_path)


@pytest.fixture
def cargo_project(tmp_path: Path) -> Path:
    """A project directory with a Cargo.toml at version 0.2.0 (not a git repository)."""
    project = tmp_path / "project"
    project.mkdir()
    (project / "Cargo.toml").write_text(cargo_toml("0.2.0"))
    return project


@pytest.fixture
def sample_messages() -> list[str]:
    """Commit messages newest first, without a release checkpoint."""
    return [
        "ci: add ci",
        "chore(git): fix ignored",
        "feat(docker): Add example dockerfile",
        "docs: simplify readme",
        "fix(commit-type): update release notes",
        "fix(deps): reduce git footprint",
        "test(invalid_json): fix broken test",
        "fix(changelog): manages edge cases",
        "tested release",
    ]
