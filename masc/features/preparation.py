"""
turns a point feature into a named field on the core cloud.

scaled features get one statistic field per cloud (names encode cloud, attribute, statistic and
scale, so an existing field of the same name is recomputed in place rather than duplicated) and,
with a second cloud, the two are merged with the feature's math operation. scale-less features
just copy the attribute onto the core points, reusing any field that already has its name.

the feature's state follows the preparation: UNPREPARED -> SOURCES_RESOLVED -> SCALED or UNSCALED
-> PREPARED, or ERROR as soon as something fails. fields committed before a failure stay on the
core cloud.
"""

import numpy as np

from masc.errors import InvalidFeatureError
from masc.features.algebra import perform_math_op
from masc.features.definitions import (
    Operation,
    PreparationState,
    Stat,
    op_to_string,
    scale_to_string,
    stat_to_string,
)
from masc.features.statistics import extract_stat
from masc.features.wrappers import retrieve_field
from masc.utils.logging import get_logger

log = get_logger(__name__)


def compose_stat_field_name(label1, name1, stat, scale, op=Operation.NO_OPERATION, label2="",
                            name2=""):
    """
    <label1>.<name1>_<STAT>[_<OP>_<label2>.<name2>_<STAT>]@<scale>
    """
    name = "{}.{}_{}".format(label1, name1, stat_to_string(stat))
    if op != Operation.NO_OPERATION:
        name += "_{}_{}.{}_{}".format(op_to_string(op), label2, name2, stat_to_string(stat))
    return name + "@" + scale_to_string(scale)


def prepare_point_feature(feature, core_points, progress=None):
    """
    compute (or reuse) the feature's field on the core cloud. returns the field name, which is
    also stored in feature.output_name.
    """
    if core_points is None or feature.cloud1 is None:
        feature.state = PreparationState.ERROR
        raise ValueError("invalid input: missing core points or cloud")

    try:
        feature.check_validity()
        source1 = retrieve_field(feature, feature.cloud1)
        feature.state = PreparationState.SOURCES_RESOLVED

        if feature.scaled():
            name = _prepare_scaled(feature, core_points, source1, progress)
        else:
            name = _prepare_unscaled(feature, core_points, source1)
    except Exception:
        feature.state = PreparationState.ERROR
        raise

    feature.output_name = name
    feature.state = PreparationState.PREPARED
    return name


#---------------------------------------------------------------------------------------------------

def _prepare_scaled(feature, core_points, source1, progress):
    feature.state = PreparationState.SCALED
    if feature.stat == Stat.NO_STAT:
        raise InvalidFeatureError("scaled features (SCx) must have an associated STAT measure")

    source2 = None
    if feature.cloud2 is not None:
        # no need to look at the second cloud without a math operation
        if feature.op != Operation.NO_OPERATION:
            source2 = retrieve_field(feature, feature.cloud2)
        else:
            log.warning(
                "feature has a second cloud associated but no MATH operation is defined",
                feature=feature.to_string())

    if source2 is not None:
        result_name = compose_stat_field_name(
            feature.cloud1_label, source1.name, feature.stat, feature.scale,
            feature.op, feature.cloud2_label, source2.name)
    else:
        result_name = compose_stat_field_name(
            feature.cloud1_label, source1.name, feature.stat, feature.scale)

    stat_field1 = extract_stat(
        core_points, feature.cloud1, source1, feature.scale, feature.stat, result_name, progress)

    if source2 is not None:
        core_cloud = core_points.cloud
        result_name2 = compose_stat_field_name(
            feature.cloud2_label, source2.name, feature.stat, feature.scale)
        existed = core_cloud.find_field(result_name2) is not None

        stat_field2 = extract_stat(
            core_points, feature.cloud2, source2, feature.scale, feature.stat, result_name2,
            progress)

        perform_math_op(stat_field1, stat_field2, feature.op)

        if not existed:
            # release some memory
            core_cloud.delete_field(result_name2)

    return stat_field1.name


def _prepare_unscaled(feature, core_points, source1):
    """
    copy the attribute onto the core points, or reuse a core field that already has its name.
    reading from the origin cloud goes through the origin indexes; reading from the core cloud
    itself goes by core index, even when a separate origin cloud exists.
    """
    feature.state = PreparationState.UNSCALED
    core_cloud = core_points.cloud
    if feature.cloud1 is not core_cloud and feature.cloud1 is not core_points.origin:
        raise InvalidFeatureError(
            "Scale-less features (SC0) can only be defined on the core points (origin) cloud")

    if feature.cloud2 is not None:
        if feature.op != Operation.NO_OPERATION:
            log.warning(
                "MATH operations cannot be performed on scale-less features (SC0), ignored",
                feature=feature.to_string())
        else:
            log.warning(
                "feature has a second cloud associated but no MATH operation is defined",
                feature=feature.to_string())

    result_name = source1.name
    result, reused = core_cloud.reserve_field(result_name)
    if reused:
        log.info("field reused", field=result_name)
        return result.name

    if feature.cloud1 is core_points.origin:
        indexes = core_points.origin_indexes
    else:
        indexes = np.arange(core_points.size())
    result.values[:] = source1.point_values(indexes)
    result.compute_min_and_max()
    core_cloud.add_field(result)
    core_cloud.show_field(result_name)

    log.info("field copied", field=result_name, points=core_points.size())
    return result.name
