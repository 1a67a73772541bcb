"""Repository selector: applies the comma-separated name allow-list."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from hubsync.models import RepositoryDescriptor


def parse_name_filter(name_filter: str | None) -> frozenset[str] | None:
    """Split 'a,b, c' into a set of names. None or a blank filter means no filter."""
    if name_filter is None:
        return None
    names = frozenset(name.strip() for name in name_filter.split(',') if name.strip())
    return names or None


class RepositorySelector:
    """Responsible for choosing which source repositories get synced"""

    def __init__(self, name_filter: str | None = None):
        """Create a selector from an optional comma-separated list of repository names."""
        self.names = parse_name_filter(name_filter)

    def is_selected(self, name: str) -> bool:
        """Return True if the name is in the allow-list (or no allow-list is set)."""
        return self.names is None or name in self.names

    def select(self, repos: Iterable[RepositoryDescriptor]) -> Iterator[RepositoryDescriptor]:
        """Yield the repositories that pass the filter, in enumeration order."""
        for repo in repos:
            if self.is_selected(repo.name):
                yield repo
