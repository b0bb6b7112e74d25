"""
enumerations describing features: their type, the statistic reducing a neighborhood, the math
operation combining two clouds, the value source and the point attribute they read.
"""

from enum import Enum, IntEnum


class FeatureType(IntEnum):
    POINT_FEATURE = 0
    NEIGHBORHOOD_FEATURE = 1
    CONTEXT_BASED_FEATURE = 2
    DUAL_CLOUD_FEATURE = 3


class Stat(IntEnum):
    NO_STAT = 0
    MEAN = 1
    MODE = 2  # value with the highest frequency
    STD = 3
    RANGE = 4
    SKEW = 5  # (MEAN - MODE) / STD


class Operation(IntEnum):
    NO_OPERATION = 0
    MINUS = 1
    PLUS = 2
    DIVIDE = 3
    MULTIPLY = 4


class Source(IntEnum):
    """
    where a feature's values come from
    """
    SCALAR_FIELD = 0
    DIM_X = 1
    DIM_Y = 2
    DIM_Z = 3
    RED = 4
    GREEN = 5
    BLUE = 6


class PointFeatureType(Enum):
    """
    the per-point attribute a point feature reads. each value is (short tag, source).
    """
    INTENSITY = ("INT", Source.SCALAR_FIELD)
    X = ("X", Source.DIM_X)
    Y = ("Y", Source.DIM_Y)
    Z = ("Z", Source.DIM_Z)
    NB_RET = ("NBRET", Source.SCALAR_FIELD)
    RET_NB = ("RETNB", Source.SCALAR_FIELD)
    ECHO_RAT = ("ECHORAT", Source.SCALAR_FIELD)
    R = ("R", Source.RED)
    G = ("G", Source.GREEN)
    B = ("B", Source.BLUE)
    NIR = ("NIR", Source.SCALAR_FIELD)
    DIP_ANG = ("DIP", Source.SCALAR_FIELD)
    DIP_DIR = ("DIPDIR", Source.SCALAR_FIELD)
    M3C2 = ("M3C2", Source.SCALAR_FIELD)
    PCV = ("PCV", Source.SCALAR_FIELD)
    SF = ("SF", Source.SCALAR_FIELD)

    @property
    def tag(self):
        return self.value[0]

    @property
    def source(self):
        return self.value[1]


class PreparationState(Enum):
    UNPREPARED = "unprepared"
    SOURCES_RESOLVED = "sources resolved"
    SCALED = "scaled"
    UNSCALED = "unscaled"
    PREPARED = "prepared"
    ERROR = "error"


def stat_to_string(stat):
    """
    upper case name of a statistic, empty for NO_STAT
    """
    return "" if stat == Stat.NO_STAT else Stat(stat).name


def op_to_string(op):
    """
    upper case name of an operation, empty for NO_OPERATION
    """
    return "" if op == Operation.NO_OPERATION else Operation(op).name


def scale_to_string(scale):
    """
    render a scale the same way whatever the locale: shortest of fixed/exponent notation, 6
    significant digits (0.5 -> '0.5', 2.0 -> '2', 1e-07 -> '1e-07')
    """
    return "{:g}".format(scale)
