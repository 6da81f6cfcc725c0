# wellcontrol/services/recorders/recorder.py
"""
Snapshot recorders for simulation runs and the field records built from them.

Runs are frozen once recorded. A TripRecord copies the simulated values of a
TripRun so actual rig observations can be entered against them later and
compared step by step.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from wellcontrol.schemas.runs import (
    FloatState,
    RecordStatus,
    SwabRun,
    TripConfig,
    TripRecord,
    TripRecordStep,
    TripRun,
    TripSample,
)
from wellcontrol.schemas.swab import SwabEstimate, SwabSample, SwabSurgeConfig
from wellcontrol.services.hydraulics.swab_surge import summarize
from wellcontrol.utils.error_handling import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SwabRunRecorder:
    """Freezes swab/surge results into SwabRun snapshots."""

    def record(self, config: SwabSurgeConfig, estimate: Optional[SwabEstimate] = None,
               samples: Optional[List[SwabSample]] = None, name: Optional[str] = None) -> SwabRun:
        run_id = uuid.uuid4()
        linked = [s.model_copy(update={"run_id": run_id}) for s in samples or []]
        run = SwabRun(
            id=run_id,
            name=name or config.name or "Swab Run",
            config=config.model_copy(deep=True),
            estimate=estimate,
            samples=linked,
            summary=summarize(linked, config),
        )
        logger.info(f"Recorded swab run {run.id} with {len(linked)} samples")
        return run


class TripRunRecorder:
    """Freezes trip simulations and manages the field records created from them."""

    def record(self, config: TripConfig, samples: List[TripSample], name: Optional[str] = None) -> TripRun:
        run_id = uuid.uuid4()
        linked = [s.model_copy(update={"run_id": run_id}) for s in samples]
        margins = [s.margin_to_fracture_kpa for s in linked if s.margin_to_fracture_kpa is not None]
        run = TripRun(
            id=run_id,
            name=name or config.name,
            config=config.model_copy(deep=True),
            samples=linked,
            max_underbalance_kpa=max((abs(min(s.pressure_delta_kpa, 0.0)) for s in linked), default=0.0),
            max_sabp_kpa=max((s.sabp_kpa for s in linked), default=0.0),
            min_margin_to_fracture_kpa=min(margins) if margins else None,
            cumulative_backfill_m3=linked[-1].cumulative_backfill_m3 if linked else 0.0,
            non_laminar=any(s.non_laminar for s in linked),
        )
        logger.info(f"Recorded trip run {run.id} ({run.name}) with {len(linked)} samples")
        return run

    # --- Field records ---------------------------------------------------

    def create_record_from_run(self, run: TripRun) -> TripRecord:
        sc = run.config.swab_surge
        steps = [
            TripRecordStep(
                step_index=s.step_index,
                bit_md_m=s.bit_md_m,
                bit_tvd_m=s.bit_tvd_m,
                sim_sabp_kpa=s.sabp_kpa,
                sim_backfill_m3=s.backfill_m3,
                sim_cumulative_backfill_m3=s.cumulative_backfill_m3,
                sim_expected_if_closed_m3=s.expected_if_closed_m3,
                sim_expected_if_open_m3=s.expected_if_open_m3,
            )
            for s in run.samples
        ]
        backfill_density = run.samples[-1].backfill_density_kgm3 if run.samples else sc.density_kgm3
        record = TripRecord(
            name=f"Record: {run.name}",
            source_run_id=run.id,
            source_run_name=run.name,
            start_bit_md_m=sc.trip_start_md_m,
            end_md_m=sc.trip_end_md_m,
            step_m=sc.trip_step_m,
            base_mud_density_kgm3=sc.density_kgm3,
            backfill_density_kgm3=backfill_density,
            steps=steps,
        )
        logger.info(f"Created trip record {record.id} from run {run.id} ({len(steps)} steps)")
        return record

    def get_step(self, record: TripRecord, step_index: int) -> TripRecordStep:
        for step in record.steps:
            if step.step_index == step_index:
                return step
        raise NotFoundError(f"Step {step_index} not found in record {record.id}",
                            details={"record_id": str(record.id), "step_index": step_index})

    def _editable_step(self, record: TripRecord, step_index: int) -> TripRecordStep:
        if record.status == RecordStatus.CANCELLED:
            raise ValidationError(f"Record {record.id} is cancelled", details={"record_id": str(record.id)})
        return self.get_step(record, step_index)

    def calculate_variance(self, step: TripRecordStep) -> TripRecordStep:
        """
        Variance = actual − simulated.

        Backfill is compared with the expected fill for a forced float state
        when one was observed, else with the simulated backfill.
        """
        if step.actual_sabp_kpa is not None:
            step.sabp_variance_kpa = step.actual_sabp_kpa - step.sim_sabp_kpa
        else:
            step.sabp_variance_kpa = None

        if step.actual_backfill_m3 is not None:
            if step.actual_float_override == FloatState.CLOSED:
                expected = step.sim_expected_if_closed_m3
            elif step.actual_float_override == FloatState.OPEN:
                expected = step.sim_expected_if_open_m3
            else:
                expected = step.sim_backfill_m3
            step.backfill_variance_m3 = step.actual_backfill_m3 - expected
            step.backfill_variance_percent = step.backfill_variance_m3 / expected * 100.0 if expected > 0 else 0.0
        else:
            step.backfill_variance_m3 = None
            step.backfill_variance_percent = None
        return step

    def record_actual(self, record: TripRecord, step_index: int, sabp_kpa: Optional[float] = None,
                      backfill_m3: Optional[float] = None, pit_change_m3: Optional[float] = None,
                      float_override: Optional[FloatState] = None, notes: str = "") -> TripRecordStep:
        step = self._editable_step(record, step_index)
        step.actual_sabp_kpa = sabp_kpa
        step.actual_backfill_m3 = backfill_m3
        step.actual_pit_change_m3 = pit_change_m3
        step.actual_float_override = float_override
        step.notes = notes
        step.observed_at = _now()
        step.skipped = False
        self.calculate_variance(step)
        self.update_variance_summary(record)
        return step

    def mark_skipped(self, record: TripRecord, step_index: int) -> TripRecordStep:
        step = self._editable_step(record, step_index)
        step.skipped = True
        step.actual_backfill_m3 = None
        step.actual_sabp_kpa = None
        step.actual_pit_change_m3 = None
        step.sabp_variance_kpa = None
        step.backfill_variance_m3 = None
        step.backfill_variance_percent = None
        step.observed_at = _now()
        self.update_variance_summary(record)
        return step

    def clear_actual(self, record: TripRecord, step_index: int) -> TripRecordStep:
        step = self._editable_step(record, step_index)
        step.actual_backfill_m3 = None
        step.actual_sabp_kpa = None
        step.actual_pit_change_m3 = None
        step.actual_float_override = None
        step.observed_at = None
        step.skipped = False
        step.notes = ""
        step.sabp_variance_kpa = None
        step.backfill_variance_m3 = None
        step.backfill_variance_percent = None
        self.update_variance_summary(record)
        return step

    def update_variance_summary(self, record: TripRecord) -> TripRecord:
        """Average and absolute-max variance over the recorded, non-skipped steps."""
        recorded = [s for s in record.steps if s.has_actual_data and not s.skipped]
        record.steps_recorded = len(recorded)
        record.steps_skipped = sum(1 for s in record.steps if s.skipped)

        sabp = [s.sabp_variance_kpa for s in recorded if s.sabp_variance_kpa is not None]
        record.avg_sabp_variance_kpa = sum(sabp) / len(sabp) if sabp else 0.0
        record.max_sabp_variance_kpa = max((abs(v) for v in sabp), default=0.0)

        fill = [s.backfill_variance_m3 for s in recorded if s.backfill_variance_m3 is not None]
        record.avg_backfill_variance_m3 = sum(fill) / len(fill) if fill else 0.0
        record.max_backfill_variance_m3 = max((abs(v) for v in fill), default=0.0)

        record.updated_at = _now()
        return record

    def mark_complete(self, record: TripRecord) -> TripRecord:
        if record.status == RecordStatus.CANCELLED:
            raise ValidationError(f"Record {record.id} is cancelled", details={"record_id": str(record.id)})
        record.status = RecordStatus.COMPLETED
        record.completed_at = _now()
        self.update_variance_summary(record)
        logger.info(f"Trip record {record.id} completed: {record.steps_recorded} recorded, "
                    f"{record.steps_skipped} skipped")
        return record

    def unmark_complete(self, record: TripRecord) -> TripRecord:
        if record.status == RecordStatus.CANCELLED:
            raise ValidationError(f"Record {record.id} is cancelled", details={"record_id": str(record.id)})
        record.status = RecordStatus.IN_PROGRESS
        record.completed_at = None
        record.updated_at = _now()
        return record

    def mark_cancelled(self, record: TripRecord) -> TripRecord:
        record.status = RecordStatus.CANCELLED
        record.updated_at = _now()
        logger.info(f"Trip record {record.id} cancelled")
        return record


swab_run_recorder = SwabRunRecorder()
trip_run_recorder = TripRunRecorder()
