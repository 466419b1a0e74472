"""Attribute aggregation over joined records."""

import logging
from typing import Union

import pandas as pd

from aquasmith.objects.pointset import PointSet
from aquasmith.objects.polygonset import PolygonSet
from aquasmith.utils.errors import ConfigError

logger = logging.getLogger(__name__)


def _table(records: Union[PointSet, PolygonSet, pd.DataFrame]) -> pd.DataFrame:
    if isinstance(records, (PointSet, PolygonSet)):
        return records.attributes
    if isinstance(records, pd.DataFrame):
        return records
    raise ConfigError(f"Cannot aggregate records of type {type(records).__name__}")


def aggregate_sum(
    records: Union[PointSet, PolygonSet, pd.DataFrame],
    key: str,
    field: str,
) -> pd.DataFrame:
    """Sum a numeric field per distinct key.

    Records whose key is null (e.g. points outside every polygon) are
    dropped. Keys with no records do not appear in the output.

    Args:
        records: Joined layer or attribute table.
        key: Grouping column.
        field: Numeric column to sum.

    Returns:
        DataFrame with columns [key, field], one row per key, sorted by key.

    Raises:
        ConfigError: If a column is missing or ``field`` is not numeric.

    Example:
        >>> totals = aggregate_sum(joined_cities, key="rgn_name", field="population")
    """
    table = _table(records)
    for column in (key, field):
        if column not in table.columns:
            raise ConfigError(
                f"Column '{column}' not found. Available columns: {list(table.columns)}"
            )
    if not pd.api.types.is_numeric_dtype(table[field]):
        raise ConfigError(f"Column '{field}' must be numeric to be summed")

    matched = table[table[key].notna()]
    dropped = len(table) - len(matched)
    if dropped:
        logger.info(f"Dropped {dropped} record(s) with no '{key}' before aggregation")

    summary = matched.groupby(key, sort=True)[field].sum().reset_index()
    logger.info(f"Aggregated '{field}' into {len(summary)} group(s) by '{key}'")
    return summary


def attach_summary(
    polygons: PolygonSet, summary: pd.DataFrame, key: str
) -> PolygonSet:
    """Left-join a per-key summary onto polygon attributes.

    Polygons without a matching summary row get null values. Row order of
    the polygon layer is preserved.
    """
    if key not in polygons.attributes.columns:
        raise ConfigError(f"Column '{key}' not found in polygon attributes")
    if key not in summary.columns:
        raise ConfigError(f"Column '{key}' not found in summary table")
    if summary[key].duplicated().any():
        raise ConfigError(f"Summary table has duplicate values in '{key}'")

    overlap = [c for c in summary.columns if c != key and c in polygons.attributes.columns]
    if overlap:
        raise ConfigError(f"Polygon attributes already contain column(s) {overlap}")

    # Joined keys come back as object dtype; match the polygon column before merging.
    summary = summary.astype({key: polygons.attributes[key].dtype})
    merged = polygons.attributes.merge(summary, on=key, how="left", validate="many_to_one")
    return polygons.with_attributes(merged)
