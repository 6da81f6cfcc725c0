"""
Tests for the run recorders and the field recording workflow: variance
against simulated values, skip/clear, summaries and status transitions.
"""

import sys
import os

import pytest

# Add the project root to the Python path
sys.path.append(os.path.abspath('.'))

from wellcontrol.schemas.geometry import AnnulusGeometry
from wellcontrol.schemas.runs import (
    FloatState,
    RecordStatus,
    StepStatus,
    TripConfig,
    TripRun,
    TripSample,
)
from wellcontrol.schemas.swab import SwabSample, SwabSurgeConfig
from wellcontrol.services.recorders import swab_run_recorder, trip_run_recorder
from wellcontrol.utils.error_handling import NotFoundError, ValidationError


def create_trip_run():
    """Three pulled stands with known simulated SABP and backfill."""
    config = TripConfig(
        name="POOH",
        swab_surge=SwabSurgeConfig(
            geometry=AnnulusGeometry(pipe_od_m=0.127, pipe_id_m=0.108, hole_id_m=0.216),
            trip_start_md_m=81.0,
            trip_end_md_m=27.0,
        ),
    )
    samples = [
        TripSample(step_index=0, bit_md_m=81.0, bit_tvd_m=81.0, sabp_kpa=0.0, backfill_m3=0.0,
                   backfill_density_kgm3=1200.0),
        TripSample(step_index=1, bit_md_m=54.0, bit_tvd_m=54.0, sabp_kpa=100.0, backfill_m3=0.5,
                   cumulative_backfill_m3=0.5, expected_if_closed_m3=0.5, expected_if_open_m3=0.1,
                   backfill_density_kgm3=1200.0),
        TripSample(step_index=2, bit_md_m=27.0, bit_tvd_m=27.0, sabp_kpa=80.0, backfill_m3=0.5,
                   cumulative_backfill_m3=1.0, expected_if_closed_m3=0.5, expected_if_open_m3=0.1,
                   backfill_density_kgm3=1200.0),
    ]
    return trip_run_recorder.record(config, samples)


def create_record():
    return trip_run_recorder.create_record_from_run(create_trip_run())


def test_trip_run_summary():
    run = create_trip_run()
    assert run.name == "POOH"
    assert run.max_sabp_kpa == 100.0
    assert run.cumulative_backfill_m3 == 1.0
    assert run.min_margin_to_fracture_kpa is None
    assert all(s.run_id == run.id for s in run.samples)


def test_swab_run_links_samples():
    config = SwabSurgeConfig(name="Check")
    samples = [
        SwabSample(md_m=1000.0, tvd_m=1000.0, pressure_delta_kpa=-300.0),
        SwabSample(md_m=500.0, tvd_m=500.0, pressure_delta_kpa=-120.0),
    ]
    run = swab_run_recorder.record(config, samples=samples)
    assert run.name == "Check"
    assert all(s.run_id == run.id for s in run.samples)
    assert run.summary.max_swab_kpa == 300.0
    assert run.max_underbalance_kpa == 300.0


def test_record_copies_simulated_values():
    run = create_trip_run()
    record = trip_run_recorder.create_record_from_run(run)
    assert record.source_run_id == run.id
    assert record.step_count == 3
    assert record.start_bit_md_m == 81.0
    assert record.end_md_m == 27.0
    assert record.trip_length_m == 54.0
    assert record.backfill_density_kgm3 == 1200.0
    assert record.steps[1].sim_sabp_kpa == 100.0
    assert record.steps[1].sim_expected_if_open_m3 == 0.1
    assert all(s.record_id == record.id for s in record.steps)
    assert all(s.status == StepStatus.PENDING for s in record.steps)


def test_record_actual_variance():
    record = create_record()
    step = trip_run_recorder.record_actual(record, 1, sabp_kpa=120.0, backfill_m3=0.6)
    assert step.status == StepStatus.RECORDED
    assert step.sabp_variance_kpa == pytest.approx(20.0)
    assert step.backfill_variance_m3 == pytest.approx(0.1)
    assert step.backfill_variance_percent == pytest.approx(20.0)
    assert step.observed_at is not None


def test_float_override_changes_expected_fill():
    record = create_record()
    step = trip_run_recorder.record_actual(record, 1, backfill_m3=0.15, float_override=FloatState.OPEN)
    assert step.backfill_variance_m3 == pytest.approx(0.05)
    assert step.backfill_variance_percent == pytest.approx(50.0)
    assert step.sabp_variance_kpa is None


def test_zero_expected_fill_gives_zero_percent():
    record = create_record()
    step = trip_run_recorder.record_actual(record, 0, backfill_m3=0.2)
    assert step.backfill_variance_m3 == pytest.approx(0.2)
    assert step.backfill_variance_percent == 0.0


def test_variance_summary():
    record = create_record()
    trip_run_recorder.record_actual(record, 1, sabp_kpa=120.0, backfill_m3=0.6)
    trip_run_recorder.record_actual(record, 2, sabp_kpa=50.0, backfill_m3=0.4)
    assert record.steps_recorded == 2
    assert record.avg_sabp_variance_kpa == pytest.approx((20.0 - 30.0) / 2)
    assert record.max_sabp_variance_kpa == pytest.approx(30.0)
    assert record.avg_backfill_variance_m3 == pytest.approx(0.0)
    assert record.max_backfill_variance_m3 == pytest.approx(0.1)


def test_skip_and_progress():
    record = create_record()
    trip_run_recorder.record_actual(record, 1, sabp_kpa=120.0)
    step = trip_run_recorder.mark_skipped(record, 2)
    assert step.status == StepStatus.SKIPPED
    assert record.steps_skipped == 1
    assert record.steps_recorded == 1
    assert record.progress_percent == pytest.approx(200.0 / 3.0)


def test_clear_resets_step_and_summary():
    record = create_record()
    trip_run_recorder.record_actual(record, 1, sabp_kpa=150.0, backfill_m3=0.7, notes="gain")
    step = trip_run_recorder.clear_actual(record, 1)
    assert step.status == StepStatus.PENDING
    assert step.notes == ""
    assert step.sabp_variance_kpa is None
    assert record.steps_recorded == 0
    assert record.avg_sabp_variance_kpa == 0.0
    assert record.max_backfill_variance_m3 == 0.0


def test_unknown_step_raises_not_found():
    record = create_record()
    with pytest.raises(NotFoundError):
        trip_run_recorder.record_actual(record, 99, sabp_kpa=100.0)


def test_complete_and_reopen():
    record = create_record()
    trip_run_recorder.mark_complete(record)
    assert record.status == RecordStatus.COMPLETED
    assert record.completed_at is not None
    trip_run_recorder.unmark_complete(record)
    assert record.status == RecordStatus.IN_PROGRESS
    assert record.completed_at is None


def test_cancelled_record_rejects_changes():
    record = create_record()
    trip_run_recorder.mark_cancelled(record)
    assert record.status == RecordStatus.CANCELLED
    with pytest.raises(ValidationError):
        trip_run_recorder.record_actual(record, 1, sabp_kpa=100.0)
    with pytest.raises(ValidationError):
        trip_run_recorder.mark_skipped(record, 1)
    with pytest.raises(ValidationError):
        trip_run_recorder.mark_complete(record)


def test_trip_run_is_frozen():
    run = create_trip_run()
    assert isinstance(run, TripRun)
    with pytest.raises(Exception):
        run.name = "changed"
