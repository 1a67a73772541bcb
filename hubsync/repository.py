"""Concrete GitPython-based bare mirror implementation."""

from __future__ import annotations

import logging
from pathlib import Path

from git import Git, GitCommandError, Repo

from hubsync.models import (
    OperationResult,
    OperationType,
    redact_credentials,
)


def _failure(operation: OperationType, message: str, error: GitCommandError) -> OperationResult:
    detail = redact_credentials(str(error.stderr or error).strip())
    return OperationResult(False, operation, f"{message}: {detail}", error)


class GitMirrorRepository:
    """Concrete implementation using GitPython"""

    def __init__(self, repo_path: Path):
        """Open an existing bare mirror at the given path."""
        self._path = repo_path
        self._repo = Repo(repo_path)
        self._logger = logging.getLogger(__name__)

    @classmethod
    def clone_mirror(cls, url: str, repo_path: Path, timeout: float | None = None) -> OperationResult:
        """Mirror-clone url into repo_path. The git process is killed after timeout seconds."""
        repo_path = Path(repo_path).resolve()
        try:
            Git(str(repo_path.parent)).clone(
                '--mirror', '--', url, str(repo_path),
                kill_after_timeout=timeout,
            )
            return OperationResult(True, OperationType.CLONE, f"Cloned into {repo_path}")
        except GitCommandError as e:
            return _failure(OperationType.CLONE, "Clone failed", e)

    def close(self) -> None:
        """Release underlying git resources."""
        self._repo.close()

    @property
    def path(self) -> Path:
        """Path to the bare repository."""
        return self._path

    def set_push_url(self, url: str, remote: str = 'origin') -> OperationResult:
        """Point the remote's push URL at url, leaving its fetch URL untouched."""
        try:
            self._repo.git.remote('set-url', '--push', '--', remote, url)
            return OperationResult(True, OperationType.SET_PUSH_URL, f"Set push URL of {remote}")
        except GitCommandError as e:
            return _failure(OperationType.SET_PUSH_URL, "Setting push URL failed", e)

    def get_push_url(self, remote: str = 'origin') -> str | None:
        """Return the configured push URL of a remote, or None if unset."""
        try:
            return self._repo.git.config('--get', f'remote.{remote}.pushurl').strip() or None
        except GitCommandError:
            return None

    def fetch(self, remote: str = 'origin', timeout: float | None = None) -> OperationResult:
        """Fetch all refs and tags from a remote, pruning refs deleted upstream."""
        try:
            self._repo.git.fetch(remote, '--tags', '--prune', kill_after_timeout=timeout)
            return OperationResult(True, OperationType.FETCH, f"Fetched from {remote}")
        except GitCommandError as e:
            return _failure(OperationType.FETCH, "Fetch failed", e)

    def push_mirror(self, remote: str = 'origin', timeout: float | None = None) -> OperationResult:
        """Force-push every ref to the remote's push URL, deleting refs absent locally."""
        try:
            self._repo.git.push('--mirror', '--force', remote, kill_after_timeout=timeout)
            return OperationResult(True, OperationType.PUSH, f"Pushed mirror to {remote}")
        except GitCommandError as e:
            return _failure(OperationType.PUSH, "Push failed", e)

    def has_branch(self, branch: str) -> bool:
        """Return True if refs/heads/<branch> exists in the mirror."""
        try:
            self._repo.git.rev_parse('--verify', '--quiet', f'refs/heads/{branch}')
            return True
        except GitCommandError:
            self._logger.debug("Branch %s not found in %s", branch, self._path)
            return False
