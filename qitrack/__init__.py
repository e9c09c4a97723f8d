"""Qitrack core library — energy engine, persistence and helpers.

Public API re-exports for convenient imports:
    from qitrack import open_tracker, growth_factor, progress_message, ...
"""

# Errors
from qitrack.errors import (
    QitrackError,
    InvalidInput,
    PersistenceFailure,
    TimerError,
)

# Growth factor & transitions
from qitrack.growth import (
    BASE_FACTOR,
    FACTOR_PER_MINUTE,
    DECAY_RATE,
    INITIAL_ENERGY,
    TARGET_ENERGY,
    growth_factor,
    practice_energy,
    skip_energy,
    project_energy,
)

# Models
from qitrack.models import (
    DayEntry,
    EngineState,
    Mutation,
    TimerState,
    Settings,
    LogStats,
)

# Engine
from qitrack.engine import (
    log_practice,
    log_skip,
    advance_day,
    edit_minutes,
    recompute,
    reset,
    verify_log,
)

# Workspace & files
from qitrack.workspace import (
    workspace_root,
    log_path,
    settings_path,
    hooks_config_path,
    timer_path,
    open_day_path,
    load_settings,
    save_settings,
    get_user_timezone,
    now_local,
)

# Persistence & orchestration
from qitrack.store import Store, JsonLogStore, MemoryStore
from qitrack.tracker import Tracker, open_tracker

# Progress & stats
from qitrack.progress import (
    percent_of_target,
    progress_tier,
    progress_message,
    format_duration,
    describe_entry,
)
from qitrack.stats import compute_stats, days_to_target, practice_streaks
