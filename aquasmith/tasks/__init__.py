"""Layer 3: Tasks - User intent translation.

Tasks translate user intent into primitive calls. Tasks must not import
matplotlib. Tasks can import rasterio for in-memory warping but never
read or write files.
"""

from aquasmith.tasks.jointask import JoinTask
from aquasmith.tasks.rastertask import RESAMPLING_METHODS, RasterTask, resolve_resampling

__all__ = [
    "JoinTask",
    "RESAMPLING_METHODS",
    "RasterTask",
    "resolve_resampling",
]
