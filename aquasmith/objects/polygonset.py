"""Polygon collections with attributes and a CRS tag."""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class PolygonSet:
    """A layer of polygon records.

    Each feature is a list of closed rings. Ring roles follow even-odd
    nesting: a ring inside an even number of the feature's other rings is an
    exterior, otherwise a hole. A multi-part feature is several exteriors in
    the same list.

    Attributes:
        rings: One list of rings per feature; each ring is an (m, 2) array.
            Open rings are closed by repeating the first vertex.
        attributes: Attribute table with one row per feature. Defaults to an
            empty table. The index is reset to a RangeIndex.
        crs: CRS identifier (e.g. 'EPSG:4326'), or None if unknown.
    """

    rings: list[list[np.ndarray]]
    attributes: Optional[pd.DataFrame] = None
    crs: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate PolygonSet parameters."""
        features = []
        for i, feature in enumerate(self.rings):
            if len(feature) == 0:
                raise ValueError(f"feature {i} has no rings")
            features.append([_close_ring(ring, i) for ring in feature])
        object.__setattr__(self, "rings", features)

        if self.attributes is None:
            attributes = pd.DataFrame(index=pd.RangeIndex(len(features)))
        else:
            if not isinstance(self.attributes, pd.DataFrame):
                raise ValueError(
                    f"attributes must be pandas DataFrame, got {type(self.attributes)}"
                )
            if len(self.attributes) != len(features):
                raise ValueError(
                    f"attributes has {len(self.attributes)} rows but there are "
                    f"{len(features)} polygons"
                )
            attributes = self.attributes.reset_index(drop=True)
        object.__setattr__(self, "attributes", attributes)

    def __len__(self) -> int:
        return len(self.rings)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Extent of all rings as (xmin, ymin, xmax, ymax)."""
        if not self.rings:
            raise ValueError("PolygonSet is empty")
        coords = np.vstack([ring for feature in self.rings for ring in feature])
        return (
            float(coords[:, 0].min()),
            float(coords[:, 1].min()),
            float(coords[:, 0].max()),
            float(coords[:, 1].max()),
        )

    def with_attributes(self, attributes: pd.DataFrame) -> "PolygonSet":
        """Return the same polygons carrying a new attribute table."""
        return PolygonSet(rings=self.rings, attributes=attributes, crs=self.crs)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"PolygonSet(n_polygons={len(self)}, "
            f"columns={list(self.attributes.columns)}, crs={self.crs})"
        )


def _close_ring(ring: np.ndarray, feature_index: int) -> np.ndarray:
    ring = np.asarray(ring, dtype=np.float64)
    if ring.ndim != 2 or ring.shape[1] != 2:
        raise ValueError(
            f"ring of feature {feature_index} must have shape (n_vertices, 2), got {ring.shape}"
        )
    if len(ring) and not np.array_equal(ring[0], ring[-1]):
        ring = np.vstack([ring, ring[:1]])
    if len(ring) < 4:
        raise ValueError(
            f"ring of feature {feature_index} needs at least 3 distinct vertices"
        )
    return ring
