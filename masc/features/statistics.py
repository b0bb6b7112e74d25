"""
neighborhood statistics: for every core point, gather the source cloud's points inside a sphere
of diameter `scale` and reduce their values to a single number. empty neighborhoods (and any
other undefined result) come out as NaN, the missing value marker.
"""

import numpy as np

from masc.config import EPSILON
from masc.errors import ProcessCancelledError
from masc.features.definitions import Stat
from masc.utils.logging import get_logger

log = get_logger(__name__)


def mode(values):
    """
    the most frequent value after rounding to single precision. keys are scanned in ascending order
    and only a strictly higher count replaces the current winner, so ties go to the lowest value.
    """
    keys, counts = np.unique(values.astype(np.float32), return_counts=True)
    # argmax returns the first maximum
    return float(keys[np.argmax(counts)])


def compute_stat(values, stat):
    """
    reduce one neighborhood's values to a scalar
    """
    values = np.asarray(values, dtype=np.float64)
    k = values.size
    if k == 0:
        return np.nan

    if stat == Stat.RANGE:
        # a streaming min/max seeded by the first value never moves off a leading NaN, and skips
        # every later one
        if np.isnan(values[0]):
            return np.nan
        return float(np.nanmax(values) - np.nanmin(values))

    if stat not in (Stat.MEAN, Stat.MODE, Stat.STD, Stat.SKEW):
        raise ValueError("Unhandled STAT measure: {}".format(stat))

    if stat == Stat.MODE:
        return mode(values)

    # sequential accumulation, one value after the other
    total = np.cumsum(values)[-1]
    total2 = np.cumsum(values * values)[-1]

    if stat == Stat.MEAN:
        return float(total / k)

    if stat == Stat.STD:
        return float(np.sqrt(abs(total2 * k - total * total)) / k)

    # SKEW
    mean = total / k
    std = np.sqrt(abs(total2 / k - mean * mean))
    if std > EPSILON:
        return float((mean - mode(values)) / std)
    return np.nan


#---------------------------------------------------------------------------------------------------

def extract_stat_from_field(query_point, octree, level, stat, source, radius):
    """
    statistic of the source values over the points within radius of query_point. query_point has
    to be in the octree's (the source cloud's local) coordinates.
    """
    neighbors = octree.spherical_range_query(query_point, level, radius)
    if neighbors.size == 0:
        return np.nan
    return compute_stat(source.point_values(neighbors), stat)


def extract_stat(core_points, source_cloud, source, scale, stat, result_name, progress=None):
    """
    compute one statistic per core point over spherical neighborhoods of diameter scale in the
    source cloud, and store it in the core cloud's field called result_name. an existing field of
    that name is reused (and overwritten); otherwise a new one is added once it's complete.

    returns the field. if progress cancels, a new field is dropped while a reused one keeps the
    values computed so far (the rest is NaN), and ProcessCancelledError is raised.
    """
    if core_points is None or source_cloud is None or source is None:
        raise ValueError("invalid input parameters")
    if not scale > 0 or stat == Stat.NO_STAT or not result_name:
        raise ValueError("invalid input parameters")

    octree = source_cloud.get_octree()
    if octree is None:
        octree = source_cloud.compute_octree(progress)

    core_cloud = core_points.cloud
    result, reused = core_cloud.reserve_field(result_name)
    result.fill(np.nan)

    # scale is the diameter!
    radius = scale / 2
    level = octree.best_level_for(radius)

    point_count = core_points.size()
    if progress is not None:
        progress.set_info("Computing field: {}\n(core points: {})".format(result_name, point_count))

    # bring the core points into the source cloud's local frame
    query_points = core_cloud.take() - source_cloud.corner

    for i in range(point_count):
        result.values[i] = extract_stat_from_field(
            query_points[i], octree, level, stat, source, radius)

        if progress is not None and not progress.step():
            log.warning("Process cancelled", field=result_name, processed=i + 1)
            raise ProcessCancelledError("Process cancelled")

    result.compute_min_and_max()
    if not reused:
        core_cloud.add_field(result)
    core_cloud.show_field(result_name)

    log.info("field computed", field=result_name, points=point_count, octree_level=level,
             reused=reused)
    return result
