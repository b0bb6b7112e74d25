"""
uniform read-only access to per-point values, whatever they're stored as. every source has a name
and answers point_value(index) and point_values(index_array) with doubles.

retrieve_field picks the right source for a point feature and fails early (with a message naming
what's missing) when the cloud can't supply it.
"""

import numpy as np

from masc.config import EPSILON
from masc.errors import InconsistentDataError, MissingPrerequisiteError
from masc.features.definitions import PointFeatureType


class ScalarSource(object):
    """
    base class. subclasses implement point_values; point_value is the one-index case.
    """

    name = ""

    def point_value(self, index):
        return float(self.point_values(np.atleast_1d(index))[0])

    def point_values(self, index_array):
        raise NotImplementedError


#---------------------------------------------------------------------------------------------------

class ScalarFieldSource(ScalarSource):
    """
    a stored scalar field, read as is
    """

    def __init__(self, field):
        self.field = field
        self.name = field.name

    def point_values(self, index_array):
        return self.field.values.take(index_array)


class DimensionSource(ScalarSource):
    """
    one coordinate (0 = X, 1 = Y, 2 = Z) of the points, in the cloud's original coordinates.
    those are rebuilt as local + corner, so they can be off from the input in the last bits (at
    most about one ulp of the largest absolute coordinate).
    """

    NAMES = ("X", "Y", "Z")

    def __init__(self, cloud, dimension):
        if dimension not in (0, 1, 2):
            raise ValueError("dimension must be 0, 1 or 2")
        self.cloud = cloud
        self.dimension = dimension
        self.name = self.NAMES[dimension]

    def point_values(self, index_array):
        local = self.cloud.points[:, self.dimension].take(index_array)
        return local + self.cloud.corner[self.dimension]


class ColorSource(ScalarSource):
    """
    one color channel (0 = red, 1 = green, 2 = blue), normalized to [0, 1]. a cloud without colors
    only fails once it's actually read.
    """

    NAMES = ("Red", "Green", "Blue")

    def __init__(self, cloud, channel):
        if channel not in (0, 1, 2):
            raise ValueError("channel must be 0, 1 or 2")
        self.cloud = cloud
        self.channel = channel
        self.name = self.NAMES[channel]

    def point_values(self, index_array):
        if not self.cloud.has_colors():
            raise MissingPrerequisiteError("Cloud has no colors")
        return self.cloud.colors[:, self.channel].take(index_array) / 255.0


class RatioSource(ScalarSource):
    """
    numerator / denominator, two stored fields of the same length
    """

    def __init__(self, numerator, denominator, name):
        self.numerator = numerator
        self.denominator = denominator
        self.name = name

    def point_values(self, index_array):
        with np.errstate(divide="ignore", invalid="ignore"):
            return self.numerator.values.take(index_array) / self.denominator.values.take(index_array)


class NormalDipSource(ScalarSource):
    """
    dip (dip=True) or dip direction of the normal vectors, in degrees. computed on the fly.
    dip direction is clockwise from north (+Y) and the same for parallel facets whichever way
    their normals point; horizontal projections shorter than epsilon give 0 for both.
    """

    def __init__(self, cloud, dip, name):
        self.cloud = cloud
        self.dip = dip
        self.name = name

    def point_values(self, index_array):
        normals = self.cloud.normals.take(index_array, axis=0)
        nx, ny, nz = normals[:, 0], normals[:, 1], normals[:, 2]
        flat = np.hypot(nx, ny) <= EPSILON

        if self.dip:
            # fabs: every normal is considered to point upwards, so the dip lands in [0, 90]
            angles = np.degrees(np.arccos(np.clip(np.abs(nz), 0.0, 1.0)))
        else:
            sign = np.where(nz < 0, -1.0, 1.0)
            angles = np.arctan2(sign * nx, sign * ny)
            angles = np.degrees(np.where(angles < 0, angles + 2 * np.pi, angles))

        return np.where(flat, 0.0, angles)


#---------------------------------------------------------------------------------------------------

def _stored_field(cloud, name, description):
    field = cloud.find_field(name)
    if field is None:
        raise MissingPrerequisiteError("Cloud has no '{}' scalar field".format(description))
    return field


def retrieve_field(feature, cloud):
    """
    build the value source a point feature reads on the given cloud. well-known field names come
    from feature.field_names.
    """
    if cloud is None:
        raise ValueError("no cloud to retrieve the field from")

    names = feature.field_names
    kind = feature.point_type

    if kind == PointFeatureType.INTENSITY:
        return ScalarFieldSource(_stored_field(cloud, names.intensity, "intensity"))
    elif kind == PointFeatureType.X:
        return DimensionSource(cloud, 0)
    elif kind == PointFeatureType.Y:
        return DimensionSource(cloud, 1)
    elif kind == PointFeatureType.Z:
        return DimensionSource(cloud, 2)
    elif kind == PointFeatureType.NB_RET:
        return ScalarFieldSource(_stored_field(cloud, names.number_of_returns, "number of returns"))
    elif kind == PointFeatureType.RET_NB:
        return ScalarFieldSource(_stored_field(cloud, names.return_number, "return number"))
    elif kind == PointFeatureType.ECHO_RAT:
        # p / q = return number / number of returns
        number_of_returns = cloud.find_field(names.number_of_returns)
        if number_of_returns is None:
            raise MissingPrerequisiteError(
                "Can't compute the 'echo ratio' field: no 'Number of Return' SF available")
        return_number = cloud.find_field(names.return_number)
        if return_number is None:
            raise MissingPrerequisiteError(
                "Can't compute the 'echo ratio' field: no 'Return number' SF available")
        if len(return_number) != len(number_of_returns) or len(return_number) != cloud.size():
            raise InconsistentDataError("Internal error (inconsistent scalar fields)")
        return RatioSource(return_number, number_of_returns, names.echo_ratio)
    elif kind == PointFeatureType.R:
        return ColorSource(cloud, 0)
    elif kind == PointFeatureType.G:
        return ColorSource(cloud, 1)
    elif kind == PointFeatureType.B:
        return ColorSource(cloud, 2)
    elif kind == PointFeatureType.NIR:
        return ScalarFieldSource(_stored_field(cloud, names.nir, "NIR"))
    elif kind in (PointFeatureType.DIP_ANG, PointFeatureType.DIP_DIR):
        if not cloud.has_normals():
            raise MissingPrerequisiteError(
                "Cloud has no normals: can't compute dip or dip dir. angles")
        if kind == PointFeatureType.DIP_ANG:
            return NormalDipSource(cloud, True, names.dip)
        return NormalDipSource(cloud, False, names.dip_dir)
    elif kind == PointFeatureType.M3C2:
        return ScalarFieldSource(_stored_field(cloud, names.m3c2, "m3c2 distance"))
    elif kind == PointFeatureType.PCV:
        return ScalarFieldSource(_stored_field(cloud, names.pcv, "PCV/Illuminance"))
    elif kind == PointFeatureType.SF:
        if feature.source_sf_index is not None:
            index = feature.source_sf_index
            if index < 0 or index >= cloud.field_count():
                raise MissingPrerequisiteError(
                    "Can't retrieve the specified SF: invalid index ({})".format(index))
            return ScalarFieldSource(cloud.get_field(index))
        field = cloud.find_field(feature.source_name)
        if field is None:
            raise MissingPrerequisiteError(
                "Can't retrieve the specified SF: no field named '{}'".format(feature.source_name))
        return ScalarFieldSource(field)

    raise ValueError("Unhandled feature type: {}".format(kind))
