import logging
import uuid
from typing import Any, Dict, List

from wellcontrol.schemas.backfill import BackfillScheduleInput, StandBackfill
from wellcontrol.schemas.geometry import AnnulusVolumeInput, AnnulusVolumeResult
from wellcontrol.schemas.hydrostatics import BhpInput, BhpResult
from wellcontrol.schemas.runs import RecordActualInput, SwabRun, TripConfig, TripRecord, TripRecordStep, TripRun
from wellcontrol.schemas.slug import SlugDeltaInput, SlugDeltaResult
from wellcontrol.schemas.survey import DepthLookupInput, DepthLookupResult
from wellcontrol.schemas.swab import PointEstimate, SwabSurgeConfig
from wellcontrol.services.hydraulics import backfill, hydrostatics, swab_surge, trip
from wellcontrol.services.hydraulics.annulus import interval_volumes
from wellcontrol.services.hydraulics.depth_mapper import DepthMapper
from wellcontrol.services.hydraulics.rheology import fit_summary
from wellcontrol.services.recorders.recorder import swab_run_recorder, trip_run_recorder
from wellcontrol.utils.error_handling import CalculationError, NotFoundError

# Configure logging
logger = logging.getLogger(__name__)

class HydraulicsService:
    """
    Service for wellbore hydraulics calculations.
    Wraps the swab/surge, hydrostatic and backfill engines and keeps the trip
    runs and field records created during the process lifetime.
    Entries stay in memory until deleted through delete_trip_run or
    delete_record.
    """

    def __init__(self):
        self._trip_runs: Dict[uuid.UUID, TripRun] = {}
        self._records: Dict[uuid.UUID, TripRecord] = {}

    def lookup_depth(self, data: DepthLookupInput) -> DepthLookupResult:
        logger.info(f"MD→TVD lookup for {len(data.query_md)} depths over {len(data.stations)} stations")
        mapper = DepthMapper.from_stations(data.stations)
        return DepthLookupResult(md=list(data.query_md), tvd=[float(t) for t in mapper.tvd_many(data.query_md)])

    def rheology_fit(self, dial600: float, dial300: float) -> Dict[str, Any]:
        power_law, bingham = fit_summary(dial600, dial300)
        return {
            "power_law": power_law._asdict() if power_law else None,
            "bingham": bingham._asdict() if bingham else None,
        }

    def point_estimate(self, config: SwabSurgeConfig) -> PointEstimate:
        logger.info(f"Point swab/surge estimate at bit {config.bit_md_m:.1f} m ({config.effective_domain.value})")
        result = swab_surge.point_estimate(config)
        logger.info(f"Point estimate: {result.pressure_delta_kpa:.2f} kPa, Re={result.reynolds:.0f}")
        return result

    def swab_profile(self, config: SwabSurgeConfig) -> SwabRun:
        """
        Integrated swab/surge estimate at the configured bit depth.

        Returns:
            Recorded SwabRun holding the estimate
        """
        logger.info(f"Swab/surge profile at bit {config.bit_md_m:.1f} m using {config.rheology_model.value}")
        estimate = swab_surge.estimate_at_bit(config)
        logger.info(f"Profile total {estimate.total_kpa:.2f} kPa, SABP {estimate.recommended_sabp_kpa:.2f} kPa")
        return swab_run_recorder.record(config, estimate=estimate)

    def swab_trip(self, config: SwabSurgeConfig) -> SwabRun:
        logger.info(f"Swab/surge trip series {config.trip_start_md_m:.1f} -> {config.trip_end_md_m:.1f} m")
        try:
            samples = swab_surge.trip_series(config)
        except ValueError as e:
            raise CalculationError(f"Swab/surge trip series failed: {str(e)}")
        return swab_run_recorder.record(config, samples=samples)

    def annulus_volumes(self, data: AnnulusVolumeInput) -> AnnulusVolumeResult:
        volumes = interval_volumes(data.top_md_m, data.bottom_md_m, data.annulus_sections, data.drill_string_sections)
        return AnnulusVolumeResult(
            top_md_m=min(data.top_md_m, data.bottom_md_m),
            bottom_md_m=max(data.top_md_m, data.bottom_md_m),
            **volumes,
        )

    def slug_delta(self, data: SlugDeltaInput) -> SlugDeltaResult:
        logger.info(f"Slug plan '{data.plan.name}' delta at {len(data.tvd_m)} depths")
        shoe = hydrostatics.delta_at_shoe_kpa(data.plan, data.shoe_tvd_m) if data.shoe_tvd_m is not None else None
        return SlugDeltaResult(
            tvd_m=list(data.tvd_m),
            delta_kpa=hydrostatics.delta_profile_kpa(data.plan, data.tvd_m),
            delta_at_shoe_kpa=shoe,
        )

    def evaluate_bhp(self, data: BhpInput) -> BhpResult:
        logger.info(f"BHP evaluation at {data.tvd_m:.1f} m TVD")
        return hydrostatics.evaluate_bhp(data)

    def backfill_schedule(self, data: BackfillScheduleInput) -> List[StandBackfill]:
        logger.info(f"Backfill schedule {data.start_md_m:.1f} -> {data.end_md_m:.1f} m, "
                    f"{len(data.plan.rules)} rules")
        try:
            return backfill.stand_schedule(
                data.plan, data.start_md_m, data.end_md_m, data.stand_length_m, data.annulus_area_m2
            )
        except ValueError as e:
            raise CalculationError(f"Backfill schedule failed: {str(e)}")

    # --- Trip runs and field records ----------------------------------------

    def simulate_trip(self, config: TripConfig) -> TripRun:
        logger.info(f"Simulating trip '{config.name}'")
        try:
            run = trip.simulate_trip(config)
        except ValueError as e:
            raise CalculationError(f"Trip simulation failed: {str(e)}")
        self._trip_runs[run.id] = run
        logger.info(f"Trip run {run.id}: max SABP {run.max_sabp_kpa:.1f} kPa, "
                    f"backfill {run.cumulative_backfill_m3:.2f} m³")
        return run

    def get_trip_run(self, run_id: uuid.UUID) -> TripRun:
        run = self._trip_runs.get(run_id)
        if run is None:
            raise NotFoundError(f"Trip run {run_id} not found")
        return run

    def delete_trip_run(self, run_id: uuid.UUID) -> None:
        """Drop a stored run. Records already started from it keep their own copy."""
        if self._trip_runs.pop(run_id, None) is None:
            raise NotFoundError(f"Trip run {run_id} not found")
        logger.info(f"Deleted trip run {run_id}")

    def create_record(self, run_id: uuid.UUID) -> TripRecord:
        record = trip_run_recorder.create_record_from_run(self.get_trip_run(run_id))
        self._records[record.id] = record
        return record

    def get_record(self, record_id: uuid.UUID) -> TripRecord:
        record = self._records.get(record_id)
        if record is None:
            raise NotFoundError(f"Trip record {record_id} not found")
        return record

    def delete_record(self, record_id: uuid.UUID) -> None:
        if self._records.pop(record_id, None) is None:
            raise NotFoundError(f"Trip record {record_id} not found")
        logger.info(f"Deleted trip record {record_id}")

    def record_actual(self, record_id: uuid.UUID, step_index: int, data: RecordActualInput) -> TripRecordStep:
        logger.info(f"Recording actuals for step {step_index} of record {record_id}")
        return trip_run_recorder.record_actual(
            self.get_record(record_id), step_index,
            sabp_kpa=data.sabp_kpa, backfill_m3=data.backfill_m3, pit_change_m3=data.pit_change_m3,
            float_override=data.float_override, notes=data.notes,
        )

    def skip_step(self, record_id: uuid.UUID, step_index: int) -> TripRecordStep:
        return trip_run_recorder.mark_skipped(self.get_record(record_id), step_index)

    def clear_step(self, record_id: uuid.UUID, step_index: int) -> TripRecordStep:
        return trip_run_recorder.clear_actual(self.get_record(record_id), step_index)

    def complete_record(self, record_id: uuid.UUID) -> TripRecord:
        return trip_run_recorder.mark_complete(self.get_record(record_id))

    def reopen_record(self, record_id: uuid.UUID) -> TripRecord:
        return trip_run_recorder.unmark_complete(self.get_record(record_id))

    def cancel_record(self, record_id: uuid.UUID) -> TripRecord:
        return trip_run_recorder.mark_cancelled(self.get_record(record_id))


# Create a singleton instance for easy access
hydraulics_service = HydraulicsService()
