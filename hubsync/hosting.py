"""PyGithub-backed hosting client for github.com and GitHub Enterprise."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from github import Auth, Github, UnknownObjectException
from github.Repository import Repository

from hubsync.models import DestinationDescriptor, HostConfig, RepositoryDescriptor

logger = logging.getLogger(__name__)


def _describe(repo: Repository, cls=RepositoryDescriptor):
    return cls(
        name=repo.name,
        clone_url=repo.clone_url,
        default_branch=repo.default_branch or '',
        owner_organization=repo.owner.login,
    )


class GithubHostingClient:
    """Hosting client for one instance. Listings are paginated transparently."""

    def __init__(self, config: HostConfig, per_page: int = 100, timeout: int = 30):
        """Build a client bound to a single instance; nothing here is shared between instances."""
        self._config = config
        self._github = Github(
            base_url=config.api_url,
            auth=Auth.Token(config.token),
            per_page=per_page,
            timeout=timeout,
        )

    @property
    def config(self) -> HostConfig:
        return self._config

    def list_repositories(self, organization: str) -> Iterator[RepositoryDescriptor]:
        """Yield every repository owned by an organization."""
        for repo in self._github.get_organization(organization).get_repos():
            yield _describe(repo)

    def repository_exists(self, organization: str, name: str) -> bool:
        try:
            self._github.get_repo(f"{organization}/{name}")
            return True
        except UnknownObjectException:
            return False

    def get_repository(self, organization: str, name: str) -> DestinationDescriptor:
        return _describe(self._github.get_repo(f"{organization}/{name}"), DestinationDescriptor)

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
    ) -> DestinationDescriptor:
        """Create an empty organization repository.

        GitHub only accepts a default branch once the branch exists, so the
        returned descriptor carries whatever the server chose; the caller
        aligns it after the first push.
        """
        logger.debug("Creating %s/%s (default branch %s)", organization, name, default_branch)
        repo = self._github.get_organization(organization).create_repo(
            name,
            description=description,
            has_issues=has_issues,
            has_wiki=has_wiki,
            has_downloads=has_downloads,
            auto_init=False,
        )
        return _describe(repo, DestinationDescriptor)

    def set_default_branch(self, organization: str, name: str, branch: str) -> DestinationDescriptor:
        repo = self._github.get_repo(f"{organization}/{name}")
        repo.edit(default_branch=branch)
        return _describe(self._github.get_repo(f"{organization}/{name}"), DestinationDescriptor)
