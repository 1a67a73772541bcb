"""
hubsync: GitHub organization mirror

Mirrors every repository of an organization on one GitHub (Enterprise)
instance to an organization on another instance, and keeps it in sync.
"""

from colorama import init as colorama_init

colorama_init(autoreset=True)

__version__ = "1.0.0"

# Re-export public API so `from hubsync import X` keeps working.
from hubsync.cache import MirrorCacheManager  # noqa: E402
from hubsync.cli import main  # noqa: E402
from hubsync.config import create_argument_parser, load_config_file  # noqa: E402
from hubsync.daemon import run_forever  # noqa: E402
from hubsync.errors import (  # noqa: E402
    CloneError,
    ConfigError,
    FetchError,
    HubSyncError,
    MirrorError,
    ProvisioningError,
    PushError,
    RefSanitizationError,
    SyncTimeoutError,
)
from hubsync.hosting import GithubHostingClient  # noqa: E402
from hubsync.models import (  # noqa: E402
    BatchResult,
    DestinationDescriptor,
    HostConfig,
    LocalMirror,
    OperationResult,
    OperationType,
    OutcomeStatus,
    RepositoryDescriptor,
    SyncConfig,
    SyncOutcome,
    SyncProgress,
    SyncState,
)
from hubsync.orchestrator import SyncOrchestrator, run_batch  # noqa: E402
from hubsync.output import (  # noqa: E402
    SECTION_WIDTH,
    BufferedOutputHandler,
    ConsoleOutputHandler,
    LoggingOutputHandler,
    NullOutputHandler,
)
from hubsync.protocols import HostingClient, MirrorRepository, OutputHandler, SyncHook  # noqa: E402
from hubsync.provisioner import RepositoryProvisioner  # noqa: E402
from hubsync.reporter import SummaryReporter  # noqa: E402
from hubsync.repository import GitMirrorRepository  # noqa: E402
from hubsync.sanitizer import RefSanitizer, filter_packed_refs  # noqa: E402
from hubsync.selector import RepositorySelector, parse_name_filter  # noqa: E402
from hubsync.synchronizer import RepositorySynchronizer  # noqa: E402

__all__ = [
    "__version__",
    # Models
    "BatchResult",
    "DestinationDescriptor",
    "HostConfig",
    "LocalMirror",
    "OperationResult",
    "OperationType",
    "OutcomeStatus",
    "RepositoryDescriptor",
    "SyncConfig",
    "SyncOutcome",
    "SyncProgress",
    "SyncState",
    # Errors
    "CloneError",
    "ConfigError",
    "FetchError",
    "HubSyncError",
    "MirrorError",
    "ProvisioningError",
    "PushError",
    "RefSanitizationError",
    "SyncTimeoutError",
    # Protocols
    "HostingClient",
    "MirrorRepository",
    "OutputHandler",
    "SyncHook",
    # Implementations
    "GitMirrorRepository",
    "GithubHostingClient",
    "BufferedOutputHandler",
    "ConsoleOutputHandler",
    "LoggingOutputHandler",
    "NullOutputHandler",
    "SECTION_WIDTH",
    # Services
    "MirrorCacheManager",
    "RefSanitizer",
    "RepositoryProvisioner",
    "RepositorySelector",
    "RepositorySynchronizer",
    "SyncOrchestrator",
    "SummaryReporter",
    "filter_packed_refs",
    "parse_name_filter",
    "run_batch",
    "run_forever",
    # Config / CLI
    "create_argument_parser",
    "load_config_file",
    "main",
]
