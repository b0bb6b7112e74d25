# pylint: disable=E0401, E1101

"""
implements an octree for spherical neighborhood extraction. the octree is stored implicitly: at
each level the enclosing cube is split into 2^level cells per axis, and every point gets a 64bit
integer address encoding its cell coordinates. a level's cell table (sorted addresses plus the
points living in each cell) is only built the first time that level is queried.
"""

import numpy as np

from masc.config import MAX_OCTREE_LEVEL


class Octree(object):
    """
    given a 3d point cloud, define the cube enclosing it and answer "which points lie within r of
    this point" queries by visiting only the cells overlapping the sphere.
    """

    def __init__(self, points):
        """
        points = nx3 array. should be at least 1 of them.
        """

        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2:
            raise ValueError("wrong point cloud array shape")
        elif points.shape[1] != 3:
            raise ValueError("only 3D spaces are supported")
        elif points.shape[0] < 1:
            raise ValueError("need at least 1 point to build an octree")

        self.points = points
        self.minimum_corner = None
        self.edge_length = None
        self._tables = {}

    #==================================

    def build(self):
        """
        compute the bounding cube. the cube is grown by a hair so the maximum corner still falls
        inside the last cell.
        """
        self.minimum_corner = self.points.min(0)
        span = (self.points.max(0) - self.minimum_corner).max()
        if span <= 0:
            # all points in the same spot
            span = 1.0
        self.edge_length = span * (1 + 1e-9)
        self._tables = {}
        return self

    def is_built(self):
        return self.edge_length is not None

    #==================================

    def cell_size(self, level):
        """
        edge length of one cell at the given level
        """
        return self.edge_length / (1 << level)

    #==================================

    def best_level_for(self, radius):
        """
        pick the level whose cell size is closest to half the radius. finer levels mean more
        (emptier) cells to visit, coarser ones mean more points to test; this keeps both bounded.
        larger radii always give coarser (or equal) levels.
        """
        if not self.is_built():
            self.build()
        aim = radius / 2
        level = 1
        min_value = (self.cell_size(1) - aim) ** 2
        for this_level in range(2, MAX_OCTREE_LEVEL + 1):
            value = (self.cell_size(this_level) - aim) ** 2
            if value < min_value:
                level = this_level
                min_value = value
        return level

    #==================================

    def _cell_coordinates(self, points, level):
        """
        integer cell coordinates of points at a level, clamped to the grid
        """
        coordinates = np.floor((points - self.minimum_corner) / self.cell_size(level))
        return np.clip(coordinates, 0, (1 << level) - 1).astype(np.int64)

    def _coordinate_to_address(self, coordinates, level):
        """
        pack cell coordinates into integer addresses. in this special case, bitwise or is the same
        as addition.
        """
        coordinates = np.atleast_2d(coordinates)
        return coordinates[:, 0] + (coordinates[:, 1] << level) + (coordinates[:, 2] << (2 * level))

    #==================================

    def _cell_table(self, level):
        """
        (unique cell addresses, start and stop offsets of each cell, point indices sorted by cell) at
        a level
        """
        if level not in self._tables:
            addresses = self._coordinate_to_address(self._cell_coordinates(self.points, level), level)
            order = np.argsort(addresses, kind="stable")
            unique_addresses, starts = np.unique(addresses.take(order), return_index=True)
            stops = np.append(starts[1:], order.size)
            self._tables[level] = (unique_addresses, starts, stops, order)
        return self._tables[level]

    #==================================

    def spherical_range_query(self, point, level, radius):
        """
        return the indices of all points within radius (euclidean distance, inclusive) of point.
        the search starts from the cell containing point and spreads to every cell touching the
        sphere's bounding box.
        """
        if not self.is_built():
            self.build()

        point = np.asarray(point, dtype=np.float64)
        cell_size = self.cell_size(level)
        cells_per_axis = 1 << level

        # range of cells covering the sphere's bounding box
        low = np.floor((point - radius - self.minimum_corner) / cell_size).astype(np.int64)
        high = np.floor((point + radius - self.minimum_corner) / cell_size).astype(np.int64)
        low = np.maximum(low, 0)
        high = np.minimum(high, cells_per_axis - 1)
        if np.any(low > high):
            # sphere doesn't touch the octree
            return np.empty(0, dtype=np.int64)

        grid = np.mgrid[low[0]:high[0] + 1, low[1]:high[1] + 1, low[2]:high[2] + 1]
        candidate_cells = grid.reshape(3, -1).T
        wanted = self._coordinate_to_address(candidate_cells, level)

        unique_addresses, starts, stops, order = self._cell_table(level)
        # only the cells that actually hold points, found by binary search
        positions = np.searchsorted(unique_addresses, wanted)
        inside = positions < unique_addresses.size
        positions, wanted = positions[inside], wanted[inside]
        positions = positions[unique_addresses.take(positions) == wanted]
        if positions.size == 0:
            return np.empty(0, dtype=np.int64)
        candidates = np.concatenate([order[starts[p]:stops[p]] for p in positions])

        # now the actual sphere test
        offsets = self.points.take(candidates, axis=0) - point
        squared_distances = np.einsum("ij,ij->i", offsets, offsets)
        return candidates[squared_distances <= radius * radius]
