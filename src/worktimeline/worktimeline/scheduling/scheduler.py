from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from fractions import Fraction
from typing import Optional, Sequence

from ..common.datetime_utils import Instant, to_day_fraction
from ..core.constants import MAX_OPERATIONS, MAX_WORKERS
from ..core.enums import DurationUnit, SortMode, TimeMode
from ..core.exceptions import EmptyOperationSetError, InvalidConfigurationError
from ..lunch.model import LunchConfig
from ..lunch.resolver import extend_interval, resolve, touches_window_end
from ..pdtv import assigner
from ..pdtv.model import PdtvState
from .factory import TimeModeStrategyFactory
from .model import OperationSpec, ScheduleResult, ScheduleRow, WorkerSelection
from .workers import apply_worker_chain, selected_workers, worker_label

logger = logging.getLogger(__name__)


class Scheduler:
    """Turns operation specs into a concrete timeline.

    The clock is threaded through operations in calculation order. Workers
    selected for the same operation run it concurrently, so fan-out never
    multiplies elapsed time.
    """

    def __init__(
        self,
        *,
        strategy_factory: TimeModeStrategyFactory | None = None,
        max_operations: int = MAX_OPERATIONS,
        max_workers: int = MAX_WORKERS,
    ):
        self._factory = strategy_factory or TimeModeStrategyFactory()
        self._max_operations = int(max_operations)
        self._max_workers = int(max_workers)

    def run(
        self,
        ops: Sequence[OperationSpec],
        workers: WorkerSelection,
        lunch: LunchConfig,
        mode: TimeMode,
        start: Instant,
        *,
        pdtv: PdtvState | None = None,
        posting_date: Optional[date] = None,
        sort_mode: SortMode = SortMode.SEQUENTIAL,
        lock_first_pause: bool = False,
    ) -> ScheduleResult:
        """Schedule ``ops`` from ``start``.

        ``lock_first_pause`` zeroes the pause of the first scheduled operation; the
        caller sets it for the very first calculation of a session.
        """
        self._validate(ops, workers)
        active = [op for op in ops if not op.deleted]
        if not active:
            raise EmptyOperationSetError("No active operations to schedule (all deleted)")

        pdtv = pdtv or PdtvState()
        total_ops = len(active)
        ranked_state, rank_of = self._rank_pdtv(active, pdtv)
        labels = {
            op.ordinal: assigner.resolve_label(rank_of[op.ordinal], total_ops, ranked_state, op.confirmation_id)
            for op in active
        }
        ordered = self._sort(active, labels, sort_mode)
        if mode == TimeMode.INDIVIDUAL:
            ordered = apply_worker_chain(ordered, workers)

        strategy = self._factory.for_mode(mode)
        windows = lunch.windows()
        posting_date = posting_date or start.date
        pdtv_auto = ranked_state.auto and ranked_state.numbered

        clock = start
        rows: list[ScheduleRow] = []
        performed: list[str] = []
        for position, op in enumerate(ordered, start=1):
            slots = selected_workers(op, workers)
            if not slots:
                logger.debug("Operation %s has no selected worker, skipped", op.ordinal)
                continue
            if lock_first_pause and not rows:
                op = replace(op, pause=Fraction(0), pause_unit=DurationUnit.MINUTE)
            performed.append(op.name)
            raw = to_day_fraction(op.duration, op.duration_unit)
            duration = strategy.working_duration(raw, worker_count=len(slots))
            display = strategy.display_duration(op.duration, worker_count=len(slots))

            clock = clock.shift(strategy.clock_pause(op.pause_days))

            shifted = resolve(clock, windows)
            op_start = shifted.instant
            extended = extend_interval(op_start, op_start.shift(duration), windows)
            op_end = extended.instant
            crossed = shifted.crossed or extended.crossed or touches_window_end(op_start, windows)

            offset = assigner.offset(rank_of[op.ordinal], total_ops, ranked_state) if pdtv_auto else 0
            for w in slots:
                rows.append(
                    ScheduleRow(
                        ordinal=op.ordinal,
                        position=position,
                        name=op.name,
                        worker_index=w,
                        worker_label=worker_label(w, workers),
                        start=op_start,
                        end=op_end,
                        crossed_lunch=crossed,
                        pause=op.pause,
                        pause_unit=op.pause_unit,
                        posting_date=posting_date,
                        duration_value=display,
                        duration_unit=op.duration_unit,
                        pdtv_label=labels[op.ordinal],
                        pdtv_auto=pdtv_auto,
                        pdtv_offset=offset,
                    )
                )
            clock = op_end

        if not rows:
            raise EmptyOperationSetError("No worker is selected for any active operation")
        logger.info("Scheduled %d operations into %d rows, clock now %s", len(performed), len(rows), clock)
        return ScheduleResult(rows=rows, clock=clock, operation_names=performed)

    def _validate(self, ops: Sequence[OperationSpec], workers: WorkerSelection) -> None:
        if not ops:
            raise InvalidConfigurationError("Operation list is empty")
        if len(ops) > self._max_operations:
            raise InvalidConfigurationError(f"At most {self._max_operations} operations are supported")
        if not 1 <= workers.count <= self._max_workers:
            raise InvalidConfigurationError(f"Worker count must be between 1 and {self._max_workers}")
        ordinals = [op.ordinal for op in ops]
        if len(set(ordinals)) != len(ordinals):
            raise InvalidConfigurationError("Operation ordinals must be unique")

    @staticmethod
    def _rank_pdtv(active: Sequence[OperationSpec], state: PdtvState) -> tuple[PdtvState, dict[int, int]]:
        """Number active operations 1..n by ordinal so deleted ones leave no gap."""
        rank_of = {op.ordinal: rank for rank, op in enumerate(sorted(active, key=lambda o: o.ordinal), start=1)}
        for name in ("last", "penultimate"):
            value = getattr(state, name)
            if value is not None and value not in rank_of:
                raise InvalidConfigurationError(f"{name} operation {value} is not an active operation")
        ranked = replace(
            state,
            last=rank_of.get(state.last) if state.last is not None else None,
            penultimate=rank_of.get(state.penultimate) if state.penultimate is not None else None,
        )
        assigner.validate_state(ranked, len(active))
        return ranked, rank_of

    @staticmethod
    def _sort(active: Sequence[OperationSpec], labels: dict[int, str], sort_mode: SortMode) -> list[OperationSpec]:
        if sort_mode == SortMode.CONFIRMATION:
            def by_label(op: OperationSpec):
                text = labels[op.ordinal]
                return (int(text) if text.isdigit() else 0, op.ordinal)

            return sorted(active, key=by_label)
        return sorted(active, key=lambda op: op.ordinal)
