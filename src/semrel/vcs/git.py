"""Commit history from a git work tree.

All access goes through the ``git`` executable. The history walk streams
``git log`` output through a pipe so the caller can stop reading at any
point; closing the generator terminates the git process.
"""

from __future__ import annotations

import subprocess
from collections.abc import Generator, Iterator
from pathlib import Path, PurePosixPath

from semrel.core.engine import HistoryEntry
from semrel.core.version import Version
from semrel.exceptions import GitError, GitTimeoutError, ProjectError, RepositoryError
from semrel.logging import get_logger
from semrel.project.manifest import read_version

log = get_logger(__name__)

_RECORD = "\x1e"
_FIELD = "\x1f"

_GIT_TIMEOUT_SECONDS = 30.0


class GitRepository:
    """Read-only view of a git repository."""

    def __init__(self, path: Path | str) -> None:
        path = Path(path)
        start = path if path.is_dir() else path.parent
        try:
            top = self._git(start, "rev-parse", "--show-toplevel")
        except GitTimeoutError:
            raise
        except GitError as e:
            raise RepositoryError(f"Not a git repository: {path}") from e
        self.path = Path(top).resolve()

    @staticmethod
    def _git(cwd: Path, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", "-c", "core.quotePath=false", *args],
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=True,
                timeout=_GIT_TIMEOUT_SECONDS,
            )
        except FileNotFoundError as e:
            raise RepositoryError("git executable not found") from e
        except subprocess.TimeoutExpired as e:
            raise GitTimeoutError(f"git {args[0]} timed out after {e.timeout:g}s") from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"git {args[0]} failed with exit code {e.returncode}", stderr=e.stderr) from e
        return result.stdout.strip()

    def _run(self, *args: str) -> str:
        return self._git(self.path, *args)

    def has_commits(self) -> bool:
        try:
            self._run("rev-parse", "--verify", "--quiet", "HEAD")
        except GitTimeoutError:
            raise
        except GitError:
            return False
        return True

    def head_message(self) -> str:
        """Return the full message of ``HEAD``.

        Raises:
            RepositoryError: If the repository has no commits
        """
        if not self.has_commits():
            raise RepositoryError(f"Repository {self.path} has no commits")
        return self._run("log", "-1", "--format=%B", "HEAD")

    def relative_path(self, path: Path | str) -> PurePosixPath:
        """Return ``path`` relative to the repository root, in git's notation."""
        try:
            relative = Path(path).resolve().relative_to(self.path)
        except ValueError as e:
            raise RepositoryError(f"{path} is outside repository {self.path}") from e
        return PurePosixPath(relative.as_posix())

    def file_at(self, rev: str, path: PurePosixPath) -> str | None:
        """Return the content of ``path`` at ``rev``, or None if it does not exist there."""
        try:
            return self._run("show", f"{rev}:{path}")
        except GitError:
            return None

    def version_at(self, rev: str, manifest: PurePosixPath) -> Version | None:
        """Return the manifest version recorded at ``rev``, if readable."""
        content = self.file_at(rev, manifest)
        if content is None:
            return None
        try:
            return read_version(manifest.name, content)
        except ProjectError as e:
            log.debug("unreadable manifest in history", rev=rev, path=str(manifest), error=str(e))
            return None

    def history(self, manifest_path: Path | str) -> Generator[HistoryEntry, None, None]:
        """Walk the first-parent chain of ``HEAD`` lazily, newest first.

        Commits that touch nothing under the manifest's directory are
        skipped. Commits that change the manifest carry the version they
        recorded and the version at their first parent.
        """
        manifest = self.relative_path(manifest_path)
        project_dir = manifest.parent
        if not self.has_commits():
            return

        process = subprocess.Popen(
            [
                "git",
                "-c",
                "core.quotePath=false",
                "log",
                "--first-parent",
                "-m",
                "--root",
                "--name-only",
                f"--format={_RECORD}%H{_FIELD}%P{_FIELD}%B{_FIELD}",
                "HEAD",
            ],
            cwd=self.path,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        finished = False
        try:
            assert process.stdout is not None
            for record in _records(process.stdout):
                sha, parents, message, files_text = record.split(_FIELD, 3)
                files = {line.strip() for line in files_text.splitlines() if line.strip()}
                if str(project_dir) != "." and not any(_is_under(name, project_dir) for name in files):
                    continue

                version = parent_version = None
                if str(manifest) in files:
                    version = self.version_at(sha, manifest)
                    parent = parents.split()[0] if parents.strip() else None
                    if parent is not None:
                        parent_version = self.version_at(parent, manifest)
                yield HistoryEntry(sha=sha, message=message.strip(), version=version, parent_version=parent_version)
            finished = True
        finally:
            # Stopped early: git may still be blocked writing to the pipe.
            if not finished and process.poll() is None:
                process.kill()
            stderr = process.stderr.read() if process.stderr else ""
            process.wait()
            if process.stdout:
                process.stdout.close()
            if process.stderr:
                process.stderr.close()
        if finished and process.returncode != 0:
            raise GitError(f"git log failed with exit code {process.returncode}", stderr=stderr)


def _records(stream: Iterator[str]) -> Iterator[str]:
    """Split a ``git log`` stream into one string per commit."""
    current: list[str] = []
    for line in stream:
        if line.startswith(_RECORD):
            if current:
                yield "".join(current)
            current = [line[len(_RECORD) :]]
        else:
            current.append(line)
    if current:
        yield "".join(current)


def _is_under(name: str, directory: PurePosixPath) -> bool:
    return PurePosixPath(name).is_relative_to(directory)
