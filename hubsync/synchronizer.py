"""RepositorySynchronizer: runs the mirror pipeline for a single repository."""

from __future__ import annotations

import logging
import time

from hubsync.cache import MirrorCacheManager
from hubsync.errors import ProvisioningError, SyncTimeoutError
from hubsync.models import (
    RepositoryDescriptor,
    SyncConfig,
    SyncProgress,
    SyncState,
)
from hubsync.protocols import OutputHandler
from hubsync.provisioner import RepositoryProvisioner
from hubsync.sanitizer import RefSanitizer

logger = logging.getLogger(__name__)


class RepositorySynchronizer:
    """Responsible for mirroring a single repository"""

    def __init__(
        self,
        provisioner: RepositoryProvisioner,
        cache: MirrorCacheManager,
        sanitizer: RefSanitizer,
        config: SyncConfig,
        destination_token: str,
        output: OutputHandler,
    ):
        """Create a synchronizer bound to one destination organization and cache."""
        self.provisioner = provisioner
        self.cache = cache
        self.sanitizer = sanitizer
        self.config = config
        self.destination_token = destination_token
        self.output = output

    def sync(
        self,
        repo: RepositoryDescriptor,
        progress: SyncProgress | None = None,
        deadline: float | None = None,
    ) -> SyncProgress:
        """Provision, refresh, fetch, sanitize and push one repository.

        deadline is a time.monotonic() timestamp. Each step records its state
        on progress, and the pipeline stops before the next step once progress
        is cancelled or the deadline has passed. Errors propagate to the caller.
        """
        progress = progress or SyncProgress()
        org = self.config.destination_org

        self._checkpoint(repo, progress, deadline)
        destination = self.provisioner.ensure_destination(repo, org)
        progress.advance(SyncState.DESTINATION_ENSURED)

        self.output.info(f"Syncing {repo.name}...")
        self.output.info(f"Source: {repo.clone_url}", indent=2)
        self.output.info(f"Target: {destination.clone_url}", indent=2)

        push_url = destination.authenticated_clone_url(self.destination_token)
        mirror = self.cache.get_or_create_mirror(
            self.config.cache_path, repo, push_url,
            timeout=self._checkpoint(repo, progress, deadline),
        )
        progress.advance(SyncState.MIRROR_READY)

        self.cache.fetch(mirror, timeout=self._checkpoint(repo, progress, deadline))
        progress.advance(SyncState.FETCHED)

        self._checkpoint(repo, progress, deadline)
        dropped = self.sanitizer.sanitize(mirror)
        if dropped:
            self.output.debug(f"{repo.name}: removed {dropped} read-only refs")
        progress.advance(SyncState.SANITIZED)

        self.cache.push(mirror, repo.default_branch, timeout=self._checkpoint(repo, progress, deadline))
        progress.advance(SyncState.PUSHED)

        try:
            self.provisioner.align_default_branch(destination, repo, org)
        except ProvisioningError as e:
            # refs are already on the destination; retried next cycle
            logger.warning("Default branch of %s not aligned: %s", repo.name, e)
            self.output.warning(f"Default branch of {repo.name} not aligned: {e}", indent=2)
        return progress

    def _checkpoint(
        self,
        repo: RepositoryDescriptor,
        progress: SyncProgress,
        deadline: float | None,
    ) -> float | None:
        """Raise if the sync was abandoned; otherwise return the seconds left before the deadline."""
        if progress.cancelled:
            raise SyncTimeoutError(f"Sync of {repo.name} abandoned at {progress.state.name}")
        if deadline is None:
            return None
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise SyncTimeoutError(f"Sync of {repo.name} ran out of time at {progress.state.name}")
        return remaining
