# pylint: disable=E0401, E1101

"""
tests for feature descriptors: the validity contract, descriptions and cloning
"""

import numpy as np

from masc.errors import FeatureNotImplementedError, InvalidFeatureError
from masc.features.definitions import (
    FeatureType,
    Operation,
    PointFeatureType,
    PreparationState,
    Source,
    Stat,
    scale_to_string,
)
from masc.features.descriptors import (
    ContextBasedFeature,
    DualCloudFeature,
    NeighborhoodFeature,
    PointFeature,
)
from masc.utils.point_clouds import CorePoints, PointCloud

SEED = 10
np.random.seed(SEED)

CLOUD_A = PointCloud(np.random.rand(10, 3), name="a")
CLOUD_B = PointCloud(np.random.rand(10, 3), name="b")

#---------------------------------------------------------------------------------------------------

def point_feature(scale=np.nan, stat=Stat.NO_STAT, op=Operation.NO_OPERATION, clouds=1,
                  point_type=PointFeatureType.Z):
    feature = PointFeature(point_type, scale=scale)
    feature.stat = stat
    feature.op = op
    if clouds >= 1:
        feature.cloud1, feature.cloud1_label = CLOUD_A, "PC1"
    if clouds >= 2:
        feature.cloud2, feature.cloud2_label = CLOUD_B, "PC2"
    return feature


def assert_invalid(feature, fragment):
    try:
        feature.check_validity()
    except InvalidFeatureError as err:
        assert fragment in str(err), "unexpected message: {}".format(err)
    else:
        raise AssertionError("{} passed validation".format(feature))

#---------------------------------------------------------------------------------------------------

def test_valid_features():
    point_feature().check_validity()
    point_feature(scale=2.0, stat=Stat.MEAN).check_validity()
    point_feature(scale=2.0, stat=Stat.STD, op=Operation.MINUS, clouds=2).check_validity()
    # a second cloud without an operation is tolerated here
    point_feature(scale=2.0, stat=Stat.MODE, clouds=2).check_validity()

    assert point_feature().is_valid() == (True, "")


def test_invalid_features():
    assert_invalid(point_feature(clouds=0), "no associated cloud")
    assert_invalid(point_feature(scale=2.0), "need a STAT")
    assert_invalid(point_feature(stat=Stat.MEAN), "at least one scale")
    assert_invalid(point_feature(scale=2.0, stat=Stat.MEAN, op=Operation.PLUS), "two clouds")

    feature = point_feature(op=Operation.DIVIDE, clouds=2)
    assert_invalid(feature, "scale-less")

    ok, message = point_feature(clouds=0).is_valid()
    assert not ok and message


def test_feature_types():
    """
    statistics are for point features only; dual-cloud and context-based ones need two clouds
    """
    neighborhood = NeighborhoodFeature(scale=2.0)
    neighborhood.cloud1 = CLOUD_A
    neighborhood.stat = Stat.MEAN
    assert_invalid(neighborhood, "Point features")

    dual = DualCloudFeature()
    dual.cloud1 = CLOUD_A
    assert_invalid(dual, "at least two clouds")
    dual.cloud2 = CLOUD_B
    dual.check_validity()

    dual = DualCloudFeature(scale=1.0)
    dual.cloud1, dual.cloud2 = CLOUD_A, CLOUD_B
    dual.op = Operation.MINUS
    assert_invalid(dual, "STAT measure")

    context = ContextBasedFeature()
    context.cloud1 = CLOUD_A
    assert_invalid(context, "context-based")

    assert point_feature().get_type() == FeatureType.POINT_FEATURE
    assert context.get_type() == FeatureType.CONTEXT_BASED_FEATURE


def test_unimplemented_types():
    core = CorePoints(CLOUD_A)
    for feature_class in (NeighborhoodFeature, ContextBasedFeature, DualCloudFeature):
        feature = feature_class()
        feature.cloud1, feature.cloud2 = CLOUD_A, CLOUD_B
        try:
            feature.prepare(core)
        except FeatureNotImplementedError as err:
            assert "not implemented" in str(err)
        else:
            raise AssertionError("{} prepared".format(feature_class.__name__))
        assert feature.state == PreparationState.ERROR
        assert feature.output_name is None

#---------------------------------------------------------------------------------------------------

def test_scaled():
    assert not point_feature().scaled()
    assert point_feature(scale=0.5, stat=Stat.MEAN).scaled()
    assert not point_feature(scale=np.inf).scaled()


def test_sources():
    assert PointFeature(PointFeatureType.INTENSITY).source == Source.SCALAR_FIELD
    assert PointFeature(PointFeatureType.Y).source == Source.DIM_Y
    assert PointFeature(PointFeatureType.B).source == Source.BLUE


def test_to_string():
    assert point_feature(point_type=PointFeatureType.INTENSITY).to_string() == "INT_SC0_PC1"
    assert point_feature(scale=2.0, stat=Stat.MEAN).to_string() == "Z_SC2_MEAN_PC1"
    feature = point_feature(scale=0.5, stat=Stat.SKEW, op=Operation.DIVIDE, clouds=2)
    assert feature.to_string() == "Z_SC0.5_SKEW_PC1_DIVIDE_PC2"

    named = PointFeature(PointFeatureType.SF, source_name="Classification")
    named.cloud1_label = "PC1"
    assert named.to_string() == "Classification_SC0_PC1"


def test_scale_to_string():
    assert scale_to_string(0.5) == "0.5"
    assert scale_to_string(2.0) == "2"
    assert scale_to_string(1.25) == "1.25"
    assert scale_to_string(1e-7) == "1e-07"


def test_clone():
    feature = point_feature(scale=2.0, stat=Stat.MEAN)
    feature.output_name = "PC1.Z_MEAN@2"
    feature.state = PreparationState.PREPARED

    twin = feature.clone()
    assert twin is not feature
    assert twin.cloud1 is feature.cloud1
    assert twin.to_string() == feature.to_string()
    assert twin.output_name is None
    assert twin.state == PreparationState.UNPREPARED
