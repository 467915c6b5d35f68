"""Override-chain sync for managed agent settings files."""

from .registry import (
    ComputeError,
    active_overrides,
    base_path,
    compute_expected,
    default_base,
    get_applicable_overrides,
    hooks_equal,
    list_override_files,
    load_base,
    load_fragment,
    merge_hooks,
    override_path,
    overrides_dir,
    write_default_base,
)
from .settings import LoadError, load_settings
from .sync import (
    STATUS_ERROR,
    STATUS_IN_SYNC,
    STATUS_MISSING,
    STATUS_OUT_OF_SYNC,
    SyncOutcome,
    SyncSummary,
    sync_all,
    sync_target,
    sync_targets,
    target_status,
)
from .targets import DiscoveryError, Target, discover_targets, unique_by_display_key

__all__ = [
    "ComputeError",
    "DiscoveryError",
    "LoadError",
    "STATUS_ERROR",
    "STATUS_IN_SYNC",
    "STATUS_MISSING",
    "STATUS_OUT_OF_SYNC",
    "SyncOutcome",
    "SyncSummary",
    "Target",
    "active_overrides",
    "base_path",
    "compute_expected",
    "default_base",
    "discover_targets",
    "get_applicable_overrides",
    "hooks_equal",
    "list_override_files",
    "load_base",
    "load_fragment",
    "load_settings",
    "merge_hooks",
    "override_path",
    "overrides_dir",
    "sync_all",
    "sync_target",
    "sync_targets",
    "target_status",
    "unique_by_display_key",
]
