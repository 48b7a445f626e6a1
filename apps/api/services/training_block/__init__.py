# Training block generation
#
# Turns a plan template into a 7-week mesocycle of workouts and sets:
# - progression: planned week-over-week overload and deload
# - dynamic_progression: performance-driven adjustments
# - materializer: plan days x weeks x exercises x sets
# - batch_writer: sequential commits capped per batch
# - generator: orchestration and retry-safe regeneration

from .constants import (
    MesocycleStatus,
    WorkoutStatus,
    SetStatus,
    ProgressionReason,
    MESOCYCLE_WEEKS,
    DELOAD_WEEK_NUMBER,
    MAX_BATCH_OPERATIONS,
)
from .progression import (
    ExerciseProgression,
    WeekTargets,
    WeekCompletion,
    ProgressionCalculator,
    DeloadCalculator,
    calculate_week_targets,
    round_to_increment,
)
from .dynamic_progression import (
    DynamicProgressionCalculator,
    PreviousWeekPerformance,
    CompletedSet,
    DynamicTargets,
)
from .materializer import TrainingBlockMaterializer, MaterializedBlock, scheduled_date_for
from .batch_writer import BatchedWriter, WriteSummary
from .generator import TrainingBlockGenerator, GenerationResult
from .warmup import WarmupSet, calculate_warmup_sets

__all__ = [
    # Constants
    'MesocycleStatus',
    'WorkoutStatus',
    'SetStatus',
    'ProgressionReason',
    'MESOCYCLE_WEEKS',
    'DELOAD_WEEK_NUMBER',
    'MAX_BATCH_OPERATIONS',

    # Progression
    'ExerciseProgression',
    'WeekTargets',
    'WeekCompletion',
    'ProgressionCalculator',
    'DeloadCalculator',
    'calculate_week_targets',
    'round_to_increment',
    'DynamicProgressionCalculator',
    'PreviousWeekPerformance',
    'CompletedSet',
    'DynamicTargets',

    # Generation
    'TrainingBlockMaterializer',
    'MaterializedBlock',
    'scheduled_date_for',
    'BatchedWriter',
    'WriteSummary',
    'TrainingBlockGenerator',
    'GenerationResult',

    'WarmupSet',
    'calculate_warmup_sets',
]
