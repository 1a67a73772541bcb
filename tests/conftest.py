"""Shared fixtures: in-memory hosting clients and git helpers."""

import subprocess
from pathlib import Path

import pytest

from hubsync import DestinationDescriptor, HostConfig, RepositoryDescriptor


def git(cwd: Path, *args: str) -> str:
    """Run a git command and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


class FakeHostingClient:
    """In-memory hosting instance.

    When repo_root is set, created repositories are real bare repos under
    repo_root/<org>/<name>.git and their clone_url is that path.
    """

    server_default_branch = "main"

    def __init__(self, url="https://ghe.example.com", token="secret-token", repo_root: Path = None):
        self._config = HostConfig(url, token)
        self.repo_root = repo_root
        self.repos: dict[tuple[str, str], DestinationDescriptor] = {}
        self.created: list[tuple[str, str, dict]] = []
        self.default_branch_updates: list[tuple[str, str, str]] = []
        self.fail_on: set[str] = set()

    @property
    def config(self) -> HostConfig:
        return self._config

    def add(self, organization: str, name: str, clone_url: str = None, default_branch: str = "main"):
        clone_url = clone_url or f"{self._config.url}/{organization}/{name}.git"
        self.repos[(organization, name)] = DestinationDescriptor(name, clone_url, default_branch, organization)
        return self.repos[(organization, name)]

    def list_repositories(self, organization):
        for (org, _name), repo in list(self.repos.items()):
            if org == organization:
                yield RepositoryDescriptor(repo.name, repo.clone_url, repo.default_branch, org)

    def repository_exists(self, organization, name):
        if name in self.fail_on:
            raise RuntimeError(f"API error for {name}")
        return (organization, name) in self.repos

    def get_repository(self, organization, name):
        return self.repos[(organization, name)]

    def create_repository(self, organization, name, **options):
        self.created.append((organization, name, options))
        clone_url = None
        if self.repo_root is not None:
            path = self.repo_root / organization / f"{name}.git"
            path.mkdir(parents=True)
            git(path, "init", "--bare", "-b", self.server_default_branch)
            clone_url = str(path)
        return self.add(organization, name, clone_url, self.server_default_branch)

    def set_default_branch(self, organization, name, branch):
        self.default_branch_updates.append((organization, name, branch))
        current = self.repos[(organization, name)]
        if self.repo_root is not None:
            git(Path(current.clone_url), "symbolic-ref", "HEAD", f"refs/heads/{branch}")
        return self.add(organization, name, current.clone_url, branch)


@pytest.fixture
def source_client() -> FakeHostingClient:
    return FakeHostingClient("https://source.example.com", "source-token")


@pytest.fixture
def destination_client() -> FakeHostingClient:
    return FakeHostingClient("https://target.example.com", "target-token")
