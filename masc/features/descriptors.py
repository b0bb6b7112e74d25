"""
feature descriptors: what to compute (attribute, clouds, scale, statistic, math operation) and,
once prepared, the name of the core cloud field holding the result.

only point features can be prepared for now. the other types are part of the model, validate like
the rest, and fail with FeatureNotImplementedError when prepared.
"""

import copy

import numpy as np

from masc.config import FieldNames
from masc.errors import FeatureNotImplementedError, InvalidFeatureError
from masc.features import preparation
from masc.features.definitions import (
    FeatureType,
    Operation,
    PointFeatureType,
    PreparationState,
    Source,
    Stat,
    op_to_string,
    scale_to_string,
    stat_to_string,
)


class Feature(object):
    """
    generic feature descriptor. scale is the neighborhood diameter (NaN for scale-less features).
    cloud1 is mandatory, cloud2 only for features combining two clouds.
    """

    feature_type = None

    def __init__(self, scale=np.nan, source=Source.SCALAR_FIELD, source_name=""):
        self.scale = scale
        self.cloud1 = None
        self.cloud2 = None
        self.cloud1_label = ""
        self.cloud2_label = ""
        self.source = source
        # mandatory for scalar fields when the field index isn't set
        self.source_name = source_name
        self.stat = Stat.NO_STAT
        self.op = Operation.NO_OPERATION

        self.output_name = None
        self.state = PreparationState.UNPREPARED

    #==================================

    def get_type(self):
        return self.feature_type

    def scaled(self):
        return bool(np.isfinite(self.scale))

    def cloud_count(self):
        if self.cloud1 is None:
            return 0
        return 2 if self.cloud2 is not None else 1

    #==================================

    def check_validity(self):
        """
        raise InvalidFeatureError if the definition doesn't hold together
        """
        cloud_count = self.cloud_count()
        if cloud_count == 0:
            raise InvalidFeatureError("feature has no associated cloud")

        if self.scaled() and self.stat == Stat.NO_STAT:
            raise InvalidFeatureError("scaled features need a STAT measure to be defined")

        if self.stat != Stat.NO_STAT:
            if self.get_type() != FeatureType.POINT_FEATURE:
                raise InvalidFeatureError("STAT measures can only be defined on Point features")
            if not self.scaled():
                raise InvalidFeatureError("STAT measures need at least one scale to be defined")

        if self.op != Operation.NO_OPERATION:
            if not self.scaled():
                raise InvalidFeatureError(
                    "math operations can't be defined on scale-less features (SC0)")
            if self.get_type() == FeatureType.DUAL_CLOUD_FEATURE:
                raise InvalidFeatureError("math operations can't be defined on dual-cloud features")
            if cloud_count < 2:
                raise InvalidFeatureError(
                    "at least two clouds are required to apply math operations")

        if self.get_type() in (FeatureType.DUAL_CLOUD_FEATURE, FeatureType.CONTEXT_BASED_FEATURE):
            if cloud_count < 2:
                raise InvalidFeatureError(
                    "at least two clouds are required to compute dual-cloud or context-based "
                    "features")

    def is_valid(self):
        """
        (True, "") or (False, reason)
        """
        try:
            self.check_validity()
        except InvalidFeatureError as err:
            return False, str(err)
        return True, ""

    #==================================

    def attribute_tag(self):
        return self.source_name or "FEATURE"

    def to_string(self):
        """
        compact description, e.g. Z_SC2_MEAN_PC1 or INT_SC0_PC1
        """
        description = "{}_SC{}".format(
            self.attribute_tag(), scale_to_string(self.scale) if self.scaled() else "0")
        if self.stat != Stat.NO_STAT:
            description += "_" + stat_to_string(self.stat)
        description += "_" + self.cloud1_label
        if self.op != Operation.NO_OPERATION:
            description += "_{}_{}".format(op_to_string(self.op), self.cloud2_label)
        return description

    def __repr__(self):
        return "<{} {}>".format(type(self).__name__, self.to_string())

    #==================================

    def clone(self):
        """
        same definition, same clouds, not prepared
        """
        twin = copy.copy(self)
        twin.output_name = None
        twin.state = PreparationState.UNPREPARED
        return twin

    #==================================

    def prepare(self, core_points, progress=None):
        """
        compute the feature's field on the core cloud and record its name in output_name
        """
        raise NotImplementedError


#---------------------------------------------------------------------------------------------------

class PointFeature(Feature):
    """
    a per-point attribute, either copied as is onto the core points (scale-less) or reduced over
    spherical neighborhoods with a statistic, optionally combined with the same statistic on a
    second cloud.
    """

    feature_type = FeatureType.POINT_FEATURE

    def __init__(self, point_type, scale=np.nan, source_name="", source_sf_index=None,
                 field_names=None):
        super(PointFeature, self).__init__(scale, point_type.source, source_name)
        self.point_type = point_type
        self.source_sf_index = source_sf_index
        self.field_names = field_names if field_names is not None else FieldNames()

    def attribute_tag(self):
        if self.point_type == PointFeatureType.SF and self.source_name:
            return self.source_name
        return self.point_type.tag

    def prepare(self, core_points, progress=None):
        return preparation.prepare_point_feature(self, core_points, progress)


class _UnimplementedFeature(Feature):

    def prepare(self, core_points, progress=None):
        self.state = PreparationState.ERROR
        raise FeatureNotImplementedError(
            "{} features are not implemented yet".format(self.get_type().name.lower()))


class NeighborhoodFeature(_UnimplementedFeature):
    """
    features describing the local geometry at a given scale
    """
    feature_type = FeatureType.NEIGHBORHOOD_FEATURE


class ContextBasedFeature(_UnimplementedFeature):
    """
    features describing the context of a point relative to a second cloud
    """
    feature_type = FeatureType.CONTEXT_BASED_FEATURE


class DualCloudFeature(_UnimplementedFeature):
    """
    features needing two clouds at once
    """
    feature_type = FeatureType.DUAL_CLOUD_FEATURE
