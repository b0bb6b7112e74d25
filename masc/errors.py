"""
exceptions raised while resolving and preparing features. every one of them carries a human
readable message; the caller decides whether a failure aborts the whole feature set.
"""


class MascError(Exception):
    """
    base class for recoverable feature errors
    """


class InvalidFeatureError(MascError, ValueError):
    """
    the feature definition breaks its validity contract
    """


class MissingPrerequisiteError(MascError):
    """
    the cloud lacks something the feature needs (scalar field, normals, colors)
    """


class InconsistentDataError(MascError):
    """
    scalar fields and clouds disagree about how many points there are
    """


class ResourceExhaustedError(MascError, MemoryError):
    """
    not enough memory to size a new field
    """


class ProcessCancelledError(MascError):
    """
    the progress callback asked us to stop
    """


class FeatureNotImplementedError(MascError, NotImplementedError):
    """
    the feature type exists in the model but can't be computed yet
    """
