"""
Exercise History

Completed sets of one exercise grouped per workout, oldest first, with the
best weight of each session and an overall personal record.
"""

import logging
from collections import OrderedDict
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from models import Exercise, Workout, WorkoutSet
from schemas import ExerciseHistory, ExerciseHistoryEntry, ExerciseHistorySet, PersonalRecord
from services.training_block.constants import SetStatus

logger = logging.getLogger(__name__)


def _entry_date(workout: Workout) -> str:
    if workout.completed_at is not None:
        return workout.completed_at.isoformat()
    return workout.scheduled_date.isoformat()


class ExerciseHistoryService:
    def __init__(self, db: Session):
        self.db = db

    def get_history(self, exercise_id: UUID) -> ExerciseHistory:
        exercise = self.db.get(Exercise, exercise_id)
        if exercise is None:
            raise NotFoundError("Exercise", exercise_id)

        rows = self.db.execute(
            select(WorkoutSet, Workout)
            .join(Workout, Workout.id == WorkoutSet.workout_id)
            .where(
                WorkoutSet.exercise_id == exercise_id,
                WorkoutSet.status == SetStatus.COMPLETED.value,
            )
            .order_by(Workout.scheduled_date, Workout.week_number, WorkoutSet.set_number)
        ).all()

        grouped: "OrderedDict[UUID, tuple]" = OrderedDict()
        for workout_set, workout in rows:
            if workout_set.actual_weight is None or workout_set.actual_reps is None:
                continue
            grouped.setdefault(workout.id, (workout, []))[1].append(workout_set)

        entries: List[ExerciseHistoryEntry] = []
        for workout, sets in grouped.values():
            best_weight = max(s.actual_weight for s in sets)
            best_set = next(s for s in sets if s.actual_weight == best_weight)
            entries.append(ExerciseHistoryEntry(
                workout_id=workout.id,
                date=_entry_date(workout),
                week_number=workout.week_number,
                mesocycle_id=workout.mesocycle_id,
                sets=[
                    ExerciseHistorySet(set_number=s.set_number, weight=s.actual_weight, reps=s.actual_reps)
                    for s in sets
                ],
                best_weight=best_weight,
                best_set_reps=best_set.actual_reps,
            ))

        entries.sort(key=lambda e: e.date)

        personal_record = None
        for entry in entries:
            # Strictly greater keeps the earliest session on ties
            if personal_record is None or entry.best_weight > personal_record.weight:
                personal_record = PersonalRecord(
                    weight=entry.best_weight, reps=entry.best_set_reps, date=entry.date
                )

        return ExerciseHistory(
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            entries=entries,
            personal_record=personal_record,
        )
