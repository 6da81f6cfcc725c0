import logging
import uuid
from fastapi import APIRouter, Query
from typing import List, Dict, Any

from wellcontrol.schemas.backfill import BackfillScheduleInput, StandBackfill
from wellcontrol.schemas.geometry import AnnulusVolumeInput, AnnulusVolumeResult
from wellcontrol.schemas.hydrostatics import BhpInput, BhpResult
from wellcontrol.schemas.runs import RecordActualInput, SwabRun, TripConfig, TripRecord, TripRecordStep, TripRun
from wellcontrol.schemas.slug import SlugDeltaInput, SlugDeltaResult
from wellcontrol.schemas.survey import DepthLookupInput, DepthLookupResult
from wellcontrol.schemas.swab import PointEstimate, SwabSurgeConfig
from wellcontrol.services.hydraulics.hydraulics_service import hydraulics_service
from wellcontrol.utils.error_handling import handle_api_error
from wellcontrol.utils.response_formatter import success_response

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["hydraulics"])


@router.post("/depth/tvd", response_model=DepthLookupResult, summary="Convert MD to TVD")
async def depth_lookup_endpoint(data: DepthLookupInput) -> DepthLookupResult:
    """
    Convert measured depths to true vertical depths over a station list.

    Stations may come from a survey or a directional plan. Queries outside the
    station range are clamped to the first/last TVD; with no stations the MD
    is returned unchanged.
    """
    try:
        return hydraulics_service.lookup_depth(data)
    except Exception as e:
        logger.error(f"Error in depth lookup: {str(e)}")
        raise handle_api_error(e)


@router.get("/rheology/fit", summary="Fit power-law and Bingham parameters from Fann readings")
async def rheology_fit_endpoint(
    dial600: float = Query(..., description="Fann 600 RPM dial reading"),
    dial300: float = Query(..., description="Fann 300 RPM dial reading"),
) -> Dict[str, Any]:
    try:
        return success_response(data=hydraulics_service.rheology_fit(dial600, dial300))
    except Exception as e:
        logger.error(f"Error in rheology fit: {str(e)}")
        raise handle_api_error(e)


@router.post("/swab-surge/point", response_model=PointEstimate, summary="Point swab/surge estimate")
async def point_estimate_endpoint(config: SwabSurgeConfig) -> PointEstimate:
    """
    Single Darcy–Weisbach estimate over the domain length with the geometry at
    the bit. Degenerate geometry returns zero pressure with `degenerate: true`.
    """
    try:
        return hydraulics_service.point_estimate(config)
    except Exception as e:
        logger.error(f"Error in point swab/surge estimate: {str(e)}")
        raise handle_api_error(e)


@router.post("/swab-surge/profile", response_model=SwabRun, summary="Integrated swab/surge at the bit")
async def swab_profile_endpoint(config: SwabSurgeConfig) -> SwabRun:
    """
    Integrates the swab (surface to bit) or surge (bit to lower limit) domain
    in `step_m` slices and returns the recorded run with the slice profile,
    total pressure and recommended SABP.
    """
    try:
        return hydraulics_service.swab_profile(config)
    except Exception as e:
        logger.error(f"Error in swab/surge profile: {str(e)}")
        raise handle_api_error(e)


@router.post("/swab-surge/trip", response_model=SwabRun, summary="Swab/surge series across a trip")
async def swab_trip_endpoint(config: SwabSurgeConfig) -> SwabRun:
    try:
        return hydraulics_service.swab_trip(config)
    except Exception as e:
        logger.error(f"Error in swab/surge trip series: {str(e)}")
        raise handle_api_error(e)


@router.post("/annulus/volumes", response_model=AnnulusVolumeResult, summary="Cased/open-hole annular volume")
async def annulus_volumes_endpoint(data: AnnulusVolumeInput) -> AnnulusVolumeResult:
    """
    Annular volume between two MDs with the drill string removed, split into
    cased and open-hole parts by section overlap.
    """
    try:
        return hydraulics_service.annulus_volumes(data)
    except Exception as e:
        logger.error(f"Error in annulus volume calculation: {str(e)}")
        raise handle_api_error(e)


@router.post("/slug/delta", response_model=SlugDeltaResult, summary="Slug plan hydrostatic delta")
async def slug_delta_endpoint(data: SlugDeltaInput) -> SlugDeltaResult:
    try:
        return hydraulics_service.slug_delta(data)
    except Exception as e:
        logger.error(f"Error in slug delta calculation: {str(e)}")
        raise handle_api_error(e)


@router.post("/bhp", response_model=BhpResult, summary="Bottomhole pressure breakdown")
async def bhp_endpoint(data: BhpInput) -> BhpResult:
    """
    BHP = SBP + hydrostatic + annular friction at a TVD. With
    `target_bhp_kpa` the required SBP and uniform density are solved; with a
    pressure window the pore/fracture check and margin are reported.
    """
    try:
        return hydraulics_service.evaluate_bhp(data)
    except Exception as e:
        logger.error(f"Error in BHP evaluation: {str(e)}")
        raise handle_api_error(e)


@router.post("/backfill/schedule", response_model=List[StandBackfill], summary="Backfill per pulled stand")
async def backfill_schedule_endpoint(data: BackfillScheduleInput) -> List[StandBackfill]:
    try:
        return hydraulics_service.backfill_schedule(data)
    except Exception as e:
        logger.error(f"Error in backfill schedule: {str(e)}")
        raise handle_api_error(e)


@router.post("/trip/simulate", response_model=TripRun, summary="Simulate a trip stand by stand")
async def simulate_trip_endpoint(config: TripConfig) -> TripRun:
    try:
        return hydraulics_service.simulate_trip(config)
    except Exception as e:
        logger.error(f"Error in trip simulation: {str(e)}")
        raise handle_api_error(e)


@router.delete("/trip/{run_id}", summary="Delete a stored trip run")
async def delete_trip_run_endpoint(run_id: uuid.UUID):
    try:
        hydraulics_service.delete_trip_run(run_id)
    except Exception as e:
        raise handle_api_error(e)
    return success_response(data={"id": str(run_id)}, message="Trip run deleted")


@router.post("/trip/{run_id}/records", response_model=TripRecord, summary="Start a field record from a trip run")
async def create_record_endpoint(run_id: uuid.UUID) -> TripRecord:
    try:
        return hydraulics_service.create_record(run_id)
    except Exception as e:
        logger.error(f"Error creating trip record: {str(e)}")
        raise handle_api_error(e)


@router.get("/records/{record_id}", response_model=TripRecord)
async def get_record_endpoint(record_id: uuid.UUID) -> TripRecord:
    try:
        return hydraulics_service.get_record(record_id)
    except Exception as e:
        raise handle_api_error(e)


@router.delete("/records/{record_id}", summary="Delete a trip record")
async def delete_record_endpoint(record_id: uuid.UUID):
    try:
        hydraulics_service.delete_record(record_id)
    except Exception as e:
        raise handle_api_error(e)
    return success_response(data={"id": str(record_id)}, message="Trip record deleted")


@router.put("/records/{record_id}/steps/{step_index}", response_model=TripRecordStep,
            summary="Record actual values for a step")
async def record_actual_endpoint(record_id: uuid.UUID, step_index: int, data: RecordActualInput) -> TripRecordStep:
    """
    Store the observed SABP, backfill and pit change for one step and compute
    the variance against the simulated values.
    """
    try:
        return hydraulics_service.record_actual(record_id, step_index, data)
    except Exception as e:
        logger.error(f"Error recording actuals: {str(e)}")
        raise handle_api_error(e)


@router.post("/records/{record_id}/steps/{step_index}/skip", response_model=TripRecordStep)
async def skip_step_endpoint(record_id: uuid.UUID, step_index: int) -> TripRecordStep:
    try:
        return hydraulics_service.skip_step(record_id, step_index)
    except Exception as e:
        raise handle_api_error(e)


@router.delete("/records/{record_id}/steps/{step_index}", response_model=TripRecordStep)
async def clear_step_endpoint(record_id: uuid.UUID, step_index: int) -> TripRecordStep:
    try:
        return hydraulics_service.clear_step(record_id, step_index)
    except Exception as e:
        raise handle_api_error(e)


@router.post("/records/{record_id}/complete", response_model=TripRecord)
async def complete_record_endpoint(record_id: uuid.UUID) -> TripRecord:
    try:
        return hydraulics_service.complete_record(record_id)
    except Exception as e:
        logger.error(f"Error completing trip record: {str(e)}")
        raise handle_api_error(e)


@router.post("/records/{record_id}/reopen", response_model=TripRecord)
async def reopen_record_endpoint(record_id: uuid.UUID) -> TripRecord:
    try:
        return hydraulics_service.reopen_record(record_id)
    except Exception as e:
        raise handle_api_error(e)


@router.post("/records/{record_id}/cancel", response_model=TripRecord)
async def cancel_record_endpoint(record_id: uuid.UUID) -> TripRecord:
    try:
        return hydraulics_service.cancel_record(record_id)
    except Exception as e:
        logger.error(f"Error cancelling trip record: {str(e)}")
        raise handle_api_error(e)
