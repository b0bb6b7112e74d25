# pylint: disable=E0401

"""
implements the point cloud container the feature engine reads from and writes to: a 3d cloud with
named per-point scalar fields, optional normals and colors, and a lazily built octree. also the
core points, i.e. the subset of a cloud for which features are actually evaluated.
"""

import numpy as np

from masc.errors import InconsistentDataError, ResourceExhaustedError
from masc.utils import geometry
from masc.utils.logging import get_logger

log = get_logger(__name__)


class Field(object):
    """
    a named, resizable array of doubles with a cached min/max. a field belongs to (at most) one
    cloud; the cloud keeps it alive once added.
    """

    def __init__(self, name, size=0):
        self.name = name
        self.values = np.empty(0, dtype=np.float64)
        self.min = np.nan
        self.max = np.nan
        if size:
            self.resize(size)

    #==================================

    def __len__(self):
        return self.values.size

    #==================================

    def resize(self, size, fill_value=np.nan):
        """
        grow or shrink the field. new slots get fill_value.
        """
        try:
            new_values = np.full(size, fill_value, dtype=np.float64)
        except MemoryError as err:
            raise ResourceExhaustedError("Not enough memory") from err
        keep = min(size, self.values.size)
        new_values[:keep] = self.values[:keep]
        self.values = new_values

    #==================================

    def fill(self, value):
        self.values.fill(value)

    #==================================

    def get_value(self, index):
        return self.values[index]

    def set_value(self, index, value):
        self.values[index] = value

    #==================================

    def compute_min_and_max(self):
        """
        refresh the cached bounds. NaN values (missing results) are ignored; a field with nothing
        but NaN has NaN bounds.
        """
        valid = self.values[~np.isnan(self.values)]
        if valid.size:
            self.min = valid.min()
            self.max = valid.max()
        else:
            self.min = self.max = np.nan


#---------------------------------------------------------------------------------------------------

class PointCloud(object):
    """
    given a 3d point cloud as a 2d numpy array, shift its points close to the origin and track its
    per-point scalar fields. normals (nx3 floats) and colors (nx3 uint8) are optional.

    fields are kept in insertion order so they can be addressed by index as well as by name. the
    octree is built the first time someone asks for it and then shared by every neighborhood query
    against this cloud.
    """

    #==================================

    def __init__(self, input_cloud, name="", normals=None, colors=None):

        input_cloud = np.asarray(input_cloud, dtype=np.float64)
        if input_cloud.ndim != 2:
            raise ValueError("input point cloud must be a 2D array")
        if input_cloud.shape[1] != 3:
            raise ValueError("must be initialized with a 3D point cloud")
        if input_cloud.shape[0] == 0:
            raise ValueError("point cloud is empty")

        self.name = name
        # now bring the point cloud in to the origin
        self.corner = input_cloud[0].copy()
        self.points = input_cloud - self.corner
        self.num_points = input_cloud.shape[0]

        self.normals = None
        self.colors = None
        if normals is not None:
            self.set_normals(normals)
        if colors is not None:
            self.set_colors(colors)

        self.fields = []
        self.display = None
        self.displayed_field = -1
        self._octree = None

    #==================================

    def __len__(self):
        return self.num_points

    def size(self):
        return self.num_points

    #==================================

    def set_normals(self, normals):
        normals = np.asarray(normals, dtype=np.float64)
        if normals.shape != (self.num_points, 3):
            raise InconsistentDataError("normals and points misaligned")
        self.normals = normals

    def has_normals(self):
        return self.normals is not None

    #==================================

    def set_colors(self, colors):
        colors = np.asarray(colors)
        if colors.shape != (self.num_points, 3):
            raise InconsistentDataError("colors and points misaligned")
        self.colors = colors.astype(np.uint8)

    def has_colors(self):
        return self.colors is not None

    #==================================

    def take(self, index_array=None, original_coordinates=True):
        """
        equivalent to ndarray.take(). return a subset of the cloud's points addressed by an
        index array, in the original coordinates if desired. if no index given, return all.
        """
        if original_coordinates:
            return_points = self.points + self.corner
        else:
            return_points = self.points
        if index_array is not None:
            return return_points.take(index_array, axis=0)
        else:
            return return_points

    #==================================

    def field_count(self):
        return len(self.fields)

    def get_field(self, index):
        return self.fields[index]

    def get_field_index(self, name):
        """
        index of the field called name, or -1
        """
        for index, field in enumerate(self.fields):
            if field.name == name:
                return index
        return -1

    def find_field(self, name):
        """
        the field called name, or None
        """
        index = self.get_field_index(name)
        return self.fields[index] if index >= 0 else None

    #==================================

    def add_scalar_field(self, name, values):
        """
        wrap an array of per-point values into a new field and add it. handy for attaching raw
        attributes (intensity, return numbers, ...) read from elsewhere.
        """
        values = np.asarray(values, dtype=np.float64)
        if values.ndim != 1:
            raise ValueError("scalar field must be a 1D array")
        field = Field(name)
        field.values = values.copy()
        field.compute_min_and_max()
        self.add_field(field)
        return field

    def add_field(self, field):
        """
        attach a field to the cloud and return its index. names are unique within a cloud.
        """
        if self.get_field_index(field.name) >= 0:
            raise ValueError("field {} already exists on this cloud".format(field.name))
        if len(field) != self.num_points:
            raise InconsistentDataError(
                "field {} has {} values for {} points".format(field.name, len(field), self.num_points))
        self.fields.append(field)
        return len(self.fields) - 1

    #==================================

    def reserve_field(self, name):
        """
        create-or-reuse. returns (field, reused): the attached field called name if there is one,
        otherwise a new field sized to the cloud which is NOT attached yet (use add_field once it
        holds something worth keeping).
        """
        existing = self.find_field(name)
        if existing is not None:
            return existing, True
        return Field(name, self.num_points), False

    #==================================

    def delete_field(self, name):
        index = self.get_field_index(name)
        if index < 0:
            raise KeyError("no field named {}".format(name))
        del self.fields[index]
        if self.displayed_field == index:
            self.displayed_field = -1
        elif self.displayed_field > index:
            self.displayed_field -= 1

    #==================================

    def show_field(self, name):
        """
        make the named field the displayed one and ask the display (if any) to redraw
        """
        if self.display is None:
            return
        self.displayed_field = self.get_field_index(name)
        self.display.redraw()

    #==================================

    def get_octree(self):
        """
        the cached octree, or None if it hasn't been built
        """
        return self._octree

    def compute_octree(self, progress=None):
        """
        build (or rebuild) the octree over the cloud's local coordinates and cache it
        """
        if progress is not None:
            progress.set_info("Computing octree ({} points)".format(self.num_points))
        octree = geometry.Octree(self.points)
        octree.build()
        log.debug("octree built", cloud=self.name, points=self.num_points)
        self._octree = octree
        return octree


#---------------------------------------------------------------------------------------------------

class CorePoints(object):
    """
    the points features are evaluated at. cloud holds their geometry and receives the output
    fields; origin is the cloud supplying raw attributes, and origin_indexes maps each core point
    to its counterpart there. when the core points are the origin cloud itself, leave
    origin_indexes out.
    """

    def __init__(self, cloud, origin=None, origin_indexes=None):
        if cloud is None:
            raise ValueError("core points need a cloud")

        self.cloud = cloud
        self.origin = origin if origin is not None else cloud

        if origin_indexes is None:
            if self.origin is not cloud and self.origin.size() != cloud.size():
                raise ValueError("origin indexes are needed when the origin cloud differs")
            origin_indexes = np.arange(cloud.size())

        origin_indexes = np.asarray(origin_indexes, dtype=np.int64)
        if origin_indexes.ndim != 1 or origin_indexes.size != cloud.size():
            raise ValueError("one origin index is needed per core point")
        # make sure the index array will index into the origin cloud
        if origin_indexes.min() < 0 or origin_indexes.max() >= self.origin.size():
            raise ValueError("origin index array addresses outside the origin cloud")

        self.origin_indexes = origin_indexes

    #==================================

    def __len__(self):
        return self.cloud.size()

    def size(self):
        return self.cloud.size()

    def origin_index(self, index):
        return self.origin_indexes[index]
