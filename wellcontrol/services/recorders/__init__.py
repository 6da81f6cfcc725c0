# wellcontrol/services/recorders/__init__.py
from wellcontrol.services.recorders.recorder import (
    SwabRunRecorder,
    TripRunRecorder,
    swab_run_recorder,
    trip_run_recorder,
)
