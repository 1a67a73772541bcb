"""Domain models: enums, dataclasses, and configuration."""

from __future__ import annotations

import os
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit, urlunsplit

REPO_SYNC_TIMEOUT = 15 * 60
DEFAULT_INTERVAL = 1.0
DEFAULT_MAX_BACKOFF = 300.0

_CREDENTIALS_RE = re.compile(r'(https?://)[^/@\s]+@')


class SyncState(Enum):
    """Pipeline steps a repository passes through in one cycle"""
    NOT_STARTED = auto()
    DESTINATION_ENSURED = auto()
    MIRROR_READY = auto()
    FETCHED = auto()
    SANITIZED = auto()
    PUSHED = auto()


class OutcomeStatus(Enum):
    """Terminal status of a repository sync"""
    SUCCESS = auto()
    FAILED = auto()
    TIMED_OUT = auto()


class OperationType(Enum):
    """Types of git operations on a local mirror"""
    CLONE = auto()
    SET_PUSH_URL = auto()
    FETCH = auto()
    PUSH = auto()


def authenticated_clone_url(clone_url: str, token: str) -> str:
    """Embed the token as basic-auth credentials in an http(s) clone URL.

    Any other URL (ssh, local path) is returned unchanged.
    """
    parts = urlsplit(clone_url)
    if parts.scheme not in ('http', 'https') or not parts.hostname:
        return clone_url
    host = parts.hostname
    if parts.port:
        host = f"{host}:{parts.port}"
    return urlunsplit(parts._replace(netloc=f"x-access-token:{token}@{host}"))


def redact_credentials(text: str) -> str:
    """Mask any inline credentials of http(s) URLs found in text."""
    return _CREDENTIALS_RE.sub(r'\1***@', text)


@dataclass(frozen=True)
class RepositoryDescriptor:
    """A repository as described by a hosting API"""
    name: str
    clone_url: str
    default_branch: str
    owner_organization: str

    @property
    def full_name(self) -> str:
        """Return 'org/name'."""
        return f"{self.owner_organization}/{self.name}"


@dataclass(frozen=True)
class DestinationDescriptor(RepositoryDescriptor):
    """A repository on the destination instance"""

    def authenticated_clone_url(self, token: str) -> str:
        """Clone URL carrying the destination token, used as the mirror's push URL."""
        return authenticated_clone_url(self.clone_url, token)


@dataclass(frozen=True)
class LocalMirror:
    """Bare mirror clone of one repository inside the cache directory"""
    name: str
    path: Path

    @property
    def packed_refs_path(self) -> Path:
        return self.path / 'packed-refs'

    @property
    def refs_path(self) -> Path:
        return self.path / 'refs'


@dataclass(frozen=True)
class OperationResult:
    """Result of a single git operation"""
    success: bool
    operation: OperationType
    message: str
    error: Exception | None = None


@dataclass(frozen=True)
class SyncOutcome:
    """Immutable outcome of one repository sync"""
    repository: str
    status: OutcomeStatus
    state: SyncState
    message: str = ''
    error: BaseException | None = None
    duration: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    def __str__(self) -> str:
        text = f"[{self.timestamp:%H:%M:%S}] {self.repository}: {self.status.name} at {self.state.name}"
        if self.message:
            text += f" ({self.message})"
        return text


class SyncProgress:
    """Tracks how far a running sync got, and lets the orchestrator abandon it.

    Shared between the worker thread running the pipeline and the thread
    waiting on its deadline.
    """

    def __init__(self):
        self.state = SyncState.NOT_STARTED
        self.error: Exception | None = None
        self._cancelled = threading.Event()

    def advance(self, state: SyncState) -> None:
        self.state = state

    def cancel(self) -> None:
        """Ask the worker to stop before its next step."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


@dataclass
class BatchResult:
    """Mutable result accumulator for one batch"""
    repos_listed: int = 0
    repos_skipped: int = 0
    outcomes: list[SyncOutcome] = field(default_factory=list)

    def add_outcome(self, outcome: SyncOutcome) -> None:
        """Record the outcome of one repository sync."""
        self.outcomes.append(outcome)

    def get_outcomes_by_status(self, status: OutcomeStatus) -> list[SyncOutcome]:
        """Filter outcomes by status (e.g. FAILED, TIMED_OUT)."""
        return [outcome for outcome in self.outcomes if outcome.status == status]

    @property
    def repos_processed(self) -> int:
        return len(self.outcomes)

    def has_failures(self) -> bool:
        """Return True if any repository failed or timed out."""
        return any(not outcome.succeeded for outcome in self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'repos_listed': self.repos_listed,
            'repos_skipped': self.repos_skipped,
            'repos_processed': self.repos_processed,
            'outcomes': [
                {
                    'repository': o.repository,
                    'status': o.status.name,
                    'state': o.state.name,
                    'message': o.message,
                    'duration': round(o.duration, 3),
                    'timestamp': o.timestamp.isoformat(),
                }
                for o in self.outcomes
            ],
            'has_failures': self.has_failures(),
        }


@dataclass(frozen=True)
class HostConfig:
    """Endpoint and credentials of one hosting instance"""
    url: str
    token: str = field(repr=False)

    @property
    def web_url(self) -> str:
        return self.url.rstrip('/')

    @property
    def api_url(self) -> str:
        """REST endpoint: api.github.com for github.com, <url>/api/v3 for Enterprise."""
        if urlsplit(self.web_url).hostname in ('github.com', 'www.github.com'):
            return 'https://api.github.com'
        return f"{self.web_url}/api/v3"


@dataclass(frozen=True)
class SyncConfig:
    """Configuration for sync operations"""
    source_org: str
    destination_org: str
    cache_path: Path
    name_filter: str | None = None
    repo_timeout: float = REPO_SYNC_TIMEOUT
    interval: float = DEFAULT_INTERVAL
    max_backoff: float = DEFAULT_MAX_BACKOFF
    parallel: bool = False
    max_workers: int = field(default_factory=lambda: min(os.cpu_count() or 4, 8))
    verbose: bool = False
    json_output: bool = False

    def with_updates(self, **kwargs) -> SyncConfig:
        """Return a new SyncConfig with the given fields replaced."""
        current = {f.name: getattr(self, f.name) for f in self.__dataclass_fields__.values()}
        current.update(kwargs)
        return SyncConfig(**current)
