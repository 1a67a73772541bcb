"""MirrorCacheManager: owns the on-disk bare mirror of every repository."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from pathlib import Path

from hubsync.errors import CloneError, FetchError, MirrorError, PushError
from hubsync.models import LocalMirror, RepositoryDescriptor, redact_credentials
from hubsync.protocols import MirrorRepository
from hubsync.repository import GitMirrorRepository

logger = logging.getLogger(__name__)


class MirrorCacheManager:
    """Creates, reuses and drives the bare mirrors under a cache directory.

    A mirror directory is never deleted or re-cloned once it exists; a
    corrupted or renamed mirror has to be removed by hand.
    """

    def __init__(self, remote_name: str = 'origin'):
        self.remote_name = remote_name

    def get_or_create_mirror(
        self,
        cache_root: Path,
        repo: RepositoryDescriptor,
        destination_clone_url: str,
        timeout: float | None = None,
    ) -> LocalMirror:
        """Reuse or mirror-clone cache_root/<name>, then (re)point its push URL at the destination."""
        cache_root = Path(cache_root).expanduser().resolve()
        cache_root.mkdir(parents=True, exist_ok=True)
        mirror = LocalMirror(repo.name, cache_root / repo.name)

        if not mirror.path.is_dir():
            logger.info("Cloning %s into %s", repo.name, mirror.path)
            result = GitMirrorRepository.clone_mirror(repo.clone_url, mirror.path, timeout=timeout)
            if not result.success:
                raise CloneError(result.message) from result.error

        with self._open(mirror, CloneError) as local:
            previous = local.get_push_url(self.remote_name)
            result = local.set_push_url(destination_clone_url, self.remote_name)
        if not result.success:
            raise CloneError(result.message) from result.error
        if previous != destination_clone_url:
            logger.debug("Push URL of %s set to %s", repo.name,
                         redact_credentials(destination_clone_url))
        return mirror

    def fetch(self, mirror: LocalMirror, timeout: float | None = None) -> None:
        """Fetch refs and tags from the source, pruning deleted refs."""
        with self._open(mirror, FetchError) as local:
            result = local.fetch(self.remote_name, timeout=timeout)
        if not result.success:
            raise FetchError(result.message) from result.error

    def push(self, mirror: LocalMirror, default_branch: str, timeout: float | None = None) -> None:
        """Mirror-push every ref to the destination, forcing non-fast-forward updates.

        A mirror push carries every ref at once, default_branch included; it is
        only checked so that a mirror missing it gets flagged.
        """
        with self._open(mirror, PushError) as local:
            if default_branch and not local.has_branch(default_branch):
                logger.warning("Default branch %s missing from mirror %s", default_branch, mirror.name)
            result = local.push_mirror(self.remote_name, timeout=timeout)
        if not result.success:
            raise PushError(result.message) from result.error

    @contextlib.contextmanager
    def _open(self, mirror: LocalMirror, error_type: type[MirrorError]) -> Iterator[MirrorRepository]:
        """Open the mirror, raising error_type if it is not a usable repository."""
        try:
            local = GitMirrorRepository(mirror.path)
        except Exception as e:
            raise error_type(f"Cannot open mirror {mirror.path}: {e}") from e
        try:
            yield local
        finally:
            local.close()
