"""RepositoryProvisioner: makes sure the destination repository exists."""

from __future__ import annotations

import logging

from hubsync.errors import ProvisioningError
from hubsync.models import DestinationDescriptor, RepositoryDescriptor
from hubsync.protocols import HostingClient, OutputHandler

SYNCED_DESCRIPTION = "This repository is automatically synced. Please push changes to {clone_url}"

logger = logging.getLogger(__name__)


class RepositoryProvisioner:
    """Looks up or creates same-named repositories on the destination instance"""

    def __init__(self, client: HostingClient, output: OutputHandler):
        self.client = client
        self.output = output

    def ensure_destination(self, repo: RepositoryDescriptor, organization: str) -> DestinationDescriptor:
        """Return the destination repository, creating it with fixed defaults if missing.

        Safe to call every cycle: an existing repository is returned as-is.
        Raises ProvisioningError on any API failure, without retrying.
        """
        try:
            if self.client.repository_exists(organization, repo.name):
                return self.client.get_repository(organization, repo.name)

            self.output.info(f"Repository `{repo.name}` not found in {organization}. Creating repository...", indent=1)
            return self.client.create_repository(
                organization,
                repo.name,
                description=SYNCED_DESCRIPTION.format(clone_url=repo.clone_url),
                has_issues=False,
                has_wiki=False,
                has_downloads=False,
                default_branch=repo.default_branch,
            )
        except Exception as e:
            raise ProvisioningError(f"Cannot provision {organization}/{repo.name}: {e}") from e

    def align_default_branch(
        self,
        destination: DestinationDescriptor,
        repo: RepositoryDescriptor,
        organization: str,
    ) -> DestinationDescriptor:
        """Set the destination's default branch to the source's when they differ."""
        if not repo.default_branch or destination.default_branch == repo.default_branch:
            return destination
        logger.info("Setting default branch of %s/%s to %s (was %r)",
                    organization, repo.name, repo.default_branch, destination.default_branch)
        try:
            return self.client.set_default_branch(organization, repo.name, repo.default_branch)
        except Exception as e:
            raise ProvisioningError(
                f"Cannot set default branch of {organization}/{repo.name}: {e}"
            ) from e
