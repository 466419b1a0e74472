"""Point collections with attributes and a CRS tag."""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class PointSet:
    """A layer of point records.

    Attributes:
        coordinates: Point coordinates (n_points, 2) as x, y.
        attributes: Attribute table with one row per point. Defaults to an
            empty table. The index is reset to a RangeIndex.
        crs: CRS identifier (e.g. 'EPSG:4326'), or None if unknown.
    """

    coordinates: np.ndarray
    attributes: Optional[pd.DataFrame] = None
    crs: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate PointSet parameters."""
        coords = np.asarray(self.coordinates, dtype=np.float64)
        if coords.ndim == 1 and coords.size == 0:
            coords = coords.reshape(0, 2)
        if coords.ndim != 2 or coords.shape[1] != 2:
            raise ValueError(
                f"coordinates must have shape (n_points, 2), got {coords.shape}"
            )
        object.__setattr__(self, "coordinates", coords)

        if self.attributes is None:
            attributes = pd.DataFrame(index=pd.RangeIndex(len(coords)))
        else:
            if not isinstance(self.attributes, pd.DataFrame):
                raise ValueError(
                    f"attributes must be pandas DataFrame, got {type(self.attributes)}"
                )
            if len(self.attributes) != len(coords):
                raise ValueError(
                    f"attributes has {len(self.attributes)} rows but there are "
                    f"{len(coords)} points"
                )
            attributes = self.attributes.reset_index(drop=True)
        object.__setattr__(self, "attributes", attributes)

    @property
    def x(self) -> np.ndarray:
        return self.coordinates[:, 0]

    @property
    def y(self) -> np.ndarray:
        return self.coordinates[:, 1]

    def __len__(self) -> int:
        return len(self.coordinates)

    def with_attributes(self, attributes: pd.DataFrame) -> "PointSet":
        """Return the same points carrying a new attribute table."""
        return PointSet(coordinates=self.coordinates, attributes=attributes, crs=self.crs)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"PointSet(n_points={len(self)}, "
            f"columns={list(self.attributes.columns)}, crs={self.crs})"
        )
