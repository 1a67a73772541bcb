"""Protocols and abstract interfaces for dependency injection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol

from hubsync.models import (
    DestinationDescriptor,
    HostConfig,
    OperationResult,
    RepositoryDescriptor,
    SyncConfig,
    SyncOutcome,
)


class HostingClient(Protocol):
    """Protocol for the hosting API of one instance"""

    @property
    def config(self) -> HostConfig: ...

    def list_repositories(self, organization: str) -> Iterator[RepositoryDescriptor]: ...
    def repository_exists(self, organization: str, name: str) -> bool: ...
    def get_repository(self, organization: str, name: str) -> DestinationDescriptor: ...
    def create_repository(
        self,
        organization: str,
        name: str,
        *,
        description: str,
        has_issues: bool,
        has_wiki: bool,
        has_downloads: bool,
        default_branch: str,
    ) -> DestinationDescriptor: ...
    def set_default_branch(self, organization: str, name: str, branch: str) -> DestinationDescriptor: ...


class MirrorRepository(Protocol):
    """Protocol for git operations on a bare mirror"""

    def set_push_url(self, url: str, remote: str = 'origin') -> OperationResult: ...
    def get_push_url(self, remote: str = 'origin') -> str | None: ...
    def fetch(self, remote: str = 'origin', timeout: float | None = None) -> OperationResult: ...
    def push_mirror(self, remote: str = 'origin', timeout: float | None = None) -> OperationResult: ...
    def has_branch(self, branch: str) -> bool: ...
    def close(self) -> None: ...

    @property
    def path(self) -> Path: ...


class OutputHandler(Protocol):
    """Protocol for handling output"""

    def info(self, message: str, indent: int = 0) -> None: ...
    def success(self, message: str, indent: int = 0) -> None: ...
    def warning(self, message: str, indent: int = 0) -> None: ...
    def error(self, message: str, indent: int = 0) -> None: ...
    def section(self, title: str) -> None: ...
    def debug(self, message: str) -> None: ...


class SyncHook(ABC):
    """Abstract base class for sync hooks (plugin architecture)"""

    @abstractmethod
    def before_sync(self, repo: RepositoryDescriptor, config: SyncConfig) -> bool:
        """Called before syncing. Return False to skip this repo."""
        pass

    @abstractmethod
    def after_sync(self, repo: RepositoryDescriptor, outcome: SyncOutcome) -> None:
        """Called after syncing a repository with its outcome."""
        pass

    @abstractmethod
    def on_error(self, repo: RepositoryDescriptor, error: BaseException) -> None:
        """Called when a repository sync failed or timed out."""
        pass
