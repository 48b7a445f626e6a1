"""
Constants for training block generation.

Block shape and progression factors. Only the batch limit can be lowered
through settings (WRITE_BATCH_LIMIT).
"""

from enum import Enum


class MesocycleStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WorkoutStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class SetStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class ProgressionReason(str, Enum):
    """Why dynamic progression picked the next week's targets."""
    FIRST_WEEK = "first_week"
    DELOAD = "deload"
    REGRESS = "regress"
    HIT_MAX_REPS = "hit_max_reps"
    HIT_TARGET = "hit_target"
    HOLD = "hold"


# 6 progressive weeks followed by one deload week
MESOCYCLE_WEEKS = 7
DELOAD_WEEK_NUMBER = 7  # 1-based, as stored on workouts
DELOAD_WEEK_INDEX = DELOAD_WEEK_NUMBER - 1  # 0-based, as used by the calculator

DELOAD_WEIGHT_FACTOR = 0.85
DELOAD_VOLUME_FACTOR = 0.5

# Plates come in 2.5 lb pairs
WEIGHT_ROUNDING_INCREMENT = 2.5

DEFAULT_MIN_REPS = 8
DEFAULT_MAX_REPS = 12
DEFAULT_WEIGHT_INCREMENT = 5.0

# Regress only after this many consecutive weeks below min reps
FAILURES_BEFORE_REGRESSION = 2

# Hard ceiling on operations per committed batch
MAX_BATCH_OPERATIONS = 500

# Warm-up ramp: (fraction of working weight, reps)
WARMUP_RAMP = ((0.6, 10), (0.8, 5))
WARMUP_MIN_WORKING_WEIGHT = 20.0
