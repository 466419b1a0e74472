"""Point-in-polygon join and per-region aggregation task.

Layer 3: Tasks - User intent translation.
"""

import logging
from typing import Literal

import pandas as pd

from aquasmith.objects.pointset import PointSet
from aquasmith.objects.polygonset import PolygonSet
from aquasmith.primitives.aggregation import aggregate_sum, attach_summary
from aquasmith.primitives.crs import crs_equal, reproject_points
from aquasmith.primitives.geometry import OVERLAP_POLICIES, spatial_join
from aquasmith.utils.errors import CRSError, raise_config_error

logger = logging.getLogger(__name__)


class JoinTask:
    """Assign points to regions and total a numeric field per region.

    Example:
        >>> from aquasmith.tasks import JoinTask
        >>>
        >>> task = JoinTask(key="rgn_name", align_crs=True)
        >>> regions_with_pop = task.summarize(cities, regions, field="population")
        >>> regions_with_pop.attributes[["rgn_name", "population"]]
    """

    def __init__(
        self,
        key: str,
        on_overlap: Literal["error", "first"] = "error",
        align_crs: bool = False,
    ):
        """Initialize join task.

        Args:
            key: Polygon attribute identifying each region.
            on_overlap: Policy for points inside several polygons ('error'
                or 'first').
            align_crs: Reproject points into the polygon CRS when the two
                differ. If False a CRS mismatch is an error.
        """
        if on_overlap not in OVERLAP_POLICIES:
            raise_config_error("on_overlap", on_overlap, valid_values=list(OVERLAP_POLICIES))
        self.key = key
        self.on_overlap = on_overlap
        self.align_crs = align_crs

    def join(self, points: PointSet, polygons: PolygonSet) -> PointSet:
        """Tag each point with its enclosing region's key (or null)."""
        if self.align_crs and not crs_equal(points.crs, polygons.crs):
            if polygons.crs is None:
                raise CRSError("Polygon layer has no CRS to align points to")
            points = reproject_points(points, polygons.crs)
        return spatial_join(points, polygons, key=self.key, on_overlap=self.on_overlap)

    def aggregate(self, joined: PointSet, field: str) -> pd.DataFrame:
        """Sum ``field`` per region over joined points."""
        return aggregate_sum(joined, key=self.key, field=field)

    def summarize(self, points: PointSet, polygons: PolygonSet, field: str) -> PolygonSet:
        """Join, aggregate and attach totals to the region layer.

        Regions containing no points get a null total.
        """
        joined = self.join(points, polygons)
        summary = self.aggregate(joined, field)
        unmatched = int(joined.attributes[self.key].isna().sum())
        if unmatched:
            logger.info(f"{unmatched} point(s) fell outside every region")
        return attach_summary(polygons, summary, key=self.key)
