"""SyncOrchestrator: mirrors every selected repository of an organization."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from pathlib import Path

from tqdm import tqdm

from hubsync.cache import MirrorCacheManager
from hubsync.errors import SyncTimeoutError
from hubsync.models import (
    REPO_SYNC_TIMEOUT,
    BatchResult,
    OutcomeStatus,
    RepositoryDescriptor,
    SyncConfig,
    SyncOutcome,
    SyncProgress,
    SyncState,
)
from hubsync.output import BufferedOutputHandler, NullOutputHandler
from hubsync.protocols import HostingClient, OutputHandler, SyncHook
from hubsync.provisioner import RepositoryProvisioner
from hubsync.sanitizer import RefSanitizer
from hubsync.selector import RepositorySelector
from hubsync.synchronizer import RepositorySynchronizer

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Main orchestrator - runs one isolated, time-boxed sync per repository.

    Every repository's pipeline runs in its own daemon thread. When the
    deadline passes the orchestrator stops waiting and moves on; the abandoned
    worker stops before its next step and its git process is killed by the
    same deadline. A failure of any kind is contained to its repository.
    """

    def __init__(
        self,
        config: SyncConfig,
        source_client: HostingClient,
        destination_client: HostingClient,
        output: OutputHandler,
        hooks: list[SyncHook] = None,
        cache: MirrorCacheManager = None,
        sanitizer: RefSanitizer = None,
    ):
        """Create an orchestrator for two hosting instances, with optional hooks and collaborators."""
        self.config = config
        self.source_client = source_client
        self.destination_client = destination_client
        self.output = output
        self.hooks = hooks or []
        self.cache = cache or MirrorCacheManager()
        self.sanitizer = sanitizer or RefSanitizer()
        self.selector = RepositorySelector(config.name_filter)
        self._in_flight: set[str] = set()
        self._in_flight_lock = threading.Lock()

    def run_batch(self) -> BatchResult:
        """List the source organization and sync every selected repository once."""
        listed = list(self.source_client.list_repositories(self.config.source_org))
        repos = list(self.selector.select(listed))
        result = BatchResult(repos_listed=len(listed), repos_skipped=len(listed) - len(repos))

        if not repos:
            self.output.warning(f"No repositories to sync in {self.config.source_org}")
            return result

        self.output.info(f"Found {len(repos)} repositories to sync in {self.config.source_org}")

        if self.config.parallel:
            self._sync_parallel(repos, result)
        else:
            self._sync_sequential(repos, result)
        return result

    def _sync_sequential(self, repos: list[RepositoryDescriptor], result: BatchResult) -> None:
        """Sync repositories one at a time with a progress bar."""
        with tqdm(total=len(repos), desc="Syncing", unit="repo",
                  disable=True if self.config.json_output else None) as pbar:
            for repo in repos:
                pbar.set_postfix_str(repo.name, refresh=True)
                self._record(result, self._sync_single_repo(repo))
                pbar.update(1)

    def _sync_parallel(self, repos: list[RepositoryDescriptor], result: BatchResult) -> None:
        """Sync repositories concurrently with buffered output per thread."""
        lock = threading.Lock()

        def _sync_with_buffer(repo: RepositoryDescriptor) -> tuple[SyncOutcome | None, BufferedOutputHandler]:
            buf = BufferedOutputHandler()
            outcome = self._sync_single_repo(repo, output_override=buf)
            return outcome, buf

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {executor.submit(_sync_with_buffer, repo): repo for repo in repos}

            with tqdm(total=len(repos), desc="Syncing repositories",
                      disable=True if self.config.json_output else None) as pbar:
                for future in concurrent.futures.as_completed(futures):
                    repo = futures[future]
                    outcome, buf = future.result()
                    with lock:
                        buf.flush_to(self.output)
                        self._record(result, outcome)
                    pbar.set_postfix_str(repo.name, refresh=True)
                    pbar.update(1)

    def _record(self, result: BatchResult, outcome: SyncOutcome | None) -> None:
        if outcome is None:
            result.repos_skipped += 1
        else:
            result.add_outcome(outcome)

    def _sync_single_repo(
        self,
        repo: RepositoryDescriptor,
        output_override: OutputHandler = None,
    ) -> SyncOutcome | None:
        """Run hooks and the time-boxed pipeline for one repository. Never raises."""
        output = output_override or self.output
        try:
            for hook in self.hooks:
                if not hook.before_sync(repo, self.config):
                    return None

            output.section(f"Processing: {repo.full_name}")
            outcome = self._sync_with_deadline(repo, output)
        except Exception as e:
            logger.error("Syncing %s FAILED: %s", repo.name, e, exc_info=e)
            outcome = SyncOutcome(repo.name, OutcomeStatus.FAILED, SyncState.NOT_STARTED, str(e), e)

        if outcome.succeeded:
            output.success(f"✓ Synced {repo.name} ({outcome.duration:.1f}s)", indent=1)
        else:
            output.error(f"✗ Syncing {repo.name} {outcome.status.name}: {outcome.message}", indent=1)

        self._run_after_hooks(repo, outcome)
        return outcome

    def _sync_with_deadline(self, repo: RepositoryDescriptor, output: OutputHandler) -> SyncOutcome:
        """Run the pipeline in a worker thread and wait for it at most repo_timeout seconds."""
        with self._in_flight_lock:
            if repo.name in self._in_flight:
                return SyncOutcome(repo.name, OutcomeStatus.FAILED, SyncState.NOT_STARTED,
                                   "an abandoned sync of this repository is still running")
            self._in_flight.add(repo.name)

        synchronizer = RepositorySynchronizer(
            RepositoryProvisioner(self.destination_client, output),
            self.cache,
            self.sanitizer,
            self.config,
            self.destination_client.config.token,
            output,
        )
        progress = SyncProgress()
        timeout = self.config.repo_timeout
        started = time.monotonic()

        def _run():
            try:
                synchronizer.sync(repo, progress, deadline=started + timeout)
            except Exception as e:
                progress.error = e
            finally:
                with self._in_flight_lock:
                    self._in_flight.discard(repo.name)

        worker = threading.Thread(target=_run, name=f"hubsync-{repo.name}", daemon=True)
        worker.start()
        worker.join(timeout)
        duration = time.monotonic() - started

        if worker.is_alive():
            progress.cancel()
            error = SyncTimeoutError(
                f"Sync of {repo.name} exceeded {timeout:g}s at {progress.state.name}"
            )
            logger.error("Syncing %s TIMED OUT: %s", repo.name, error)
            return SyncOutcome(repo.name, OutcomeStatus.TIMED_OUT, progress.state,
                               str(error), error, duration)

        if progress.error is not None:
            error = progress.error
            logger.error("Syncing %s FAILED: %s", repo.name, error, exc_info=error)
            status = OutcomeStatus.TIMED_OUT if isinstance(error, SyncTimeoutError) else OutcomeStatus.FAILED
            return SyncOutcome(repo.name, status, progress.state, str(error), error, duration)

        return SyncOutcome(repo.name, OutcomeStatus.SUCCESS, progress.state, duration=duration)

    def _run_after_hooks(self, repo: RepositoryDescriptor, outcome: SyncOutcome) -> None:
        for hook in self.hooks:
            try:
                if outcome.error is not None:
                    hook.on_error(repo, outcome.error)
                hook.after_sync(repo, outcome)
            except Exception as e:
                logger.error("Hook %s failed for %s: %s", type(hook).__name__, repo.name, e, exc_info=e)


def run_batch(
    source_client: HostingClient,
    destination_client: HostingClient,
    source_org: str,
    destination_org: str,
    name_filter: str | None = None,
    *,
    cache_root: Path,
    repo_timeout: float = REPO_SYNC_TIMEOUT,
    output: OutputHandler = None,
    hooks: list[SyncHook] = None,
) -> BatchResult:
    """Sync every selected repository of source_org into destination_org once."""
    config = SyncConfig(
        source_org=source_org,
        destination_org=destination_org,
        cache_path=Path(cache_root),
        name_filter=name_filter,
        repo_timeout=repo_timeout,
    )
    orchestrator = SyncOrchestrator(
        config, source_client, destination_client, output or NullOutputHandler(), hooks,
    )
    return orchestrator.run_batch()
