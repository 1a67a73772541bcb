"""Typed exceptions raised by the sync engine."""

from __future__ import annotations


class HubSyncError(Exception):
    """Base exception for hubsync"""
    exit_code = 1


class ConfigError(HubSyncError):
    """Invalid or missing configuration"""
    exit_code = 2


class ProvisioningError(HubSyncError):
    """Destination repository could not be looked up or created"""


class MirrorError(HubSyncError):
    """A git operation on the local mirror failed"""


class CloneError(MirrorError):
    """Mirror clone from the source failed"""


class FetchError(MirrorError):
    """Fetch from the source failed"""


class PushError(MirrorError):
    """Mirror push to the destination failed"""


class RefSanitizationError(HubSyncError):
    """Read-only refs could not be removed from the local mirror"""


class SyncTimeoutError(HubSyncError, TimeoutError):
    """A repository sync exceeded its deadline"""
