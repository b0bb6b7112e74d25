"""
configuration: the names of the well-known scalar fields we look for on incoming clouds, plus the
numeric constants shared by the feature engine. field names differ between data sources (LAS
exports, M3C2 outputs, ...), so they are injected into features rather than baked in.
"""

from pathlib import Path

import numpy as np
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


# deepest octree level. three bits per level must fit in a 64 bit cell address.
MAX_OCTREE_LEVEL = 21

# threshold below which a divisor or a standard deviation counts as zero (single precision epsilon)
EPSILON = float(np.finfo(np.float32).eps)

# how many progress steps between two progress log lines
VERBOSITY_INTERVAL = 10000


class FieldNames(BaseModel):
    """
    names of the scalar fields behind the stored-attribute features
    """

    model_config = ConfigDict(frozen=True)

    intensity: str = Field(default="Intensity", description="LAS intensity")
    number_of_returns: str = Field(
        default="Number Of Returns",
        description="LAS number of returns of the pulse",
    )
    return_number: str = Field(default="Return Number", description="LAS return number")
    nir: str = Field(default="NIR", description="near infrared channel")
    m3c2: str = Field(default="M3C2 distance", description="externally computed M3C2 distance")
    pcv: str = Field(default="Illuminance (PCV)", description="externally computed illuminance")
    echo_ratio: str = Field(default="EchoRat", description="name given to the echo ratio")
    dip: str = Field(default="Norm dip", description="name given to the normal dip angle")
    dip_dir: str = Field(
        default="Norm dip dir.",
        description="name given to the normal dip direction",
    )

    @field_validator("*")
    @classmethod
    def not_blank(cls, v):
        """field names are used as keys, so they can't be empty"""
        if not v.strip():
            raise ValueError("field names can't be blank")
        return v


def load_field_names(path):
    """
    read field names from a yaml file. the names can sit at the top level of the document or under
    a 'field_names' key; anything left out keeps its default.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError("field name config not found: {}".format(path))

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if "field_names" in raw:
        raw = raw["field_names"] or {}

    return FieldNames(**raw)
