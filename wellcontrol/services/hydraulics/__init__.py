# wellcontrol/services/hydraulics/__init__.py

"""
Wellbore hydraulics core: MD/TVD mapping, rheology and friction
correlations, swab/surge estimation, hydrostatic column evaluation,
backfill volumes and trip simulation.

Import the submodules directly; the service singleton lives in
``wellcontrol.services.hydraulics.hydraulics_service``.
"""
