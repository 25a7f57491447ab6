__version__ = "0.1.0"

import logging

from . import errors, vlrs
from .errors import LaskitError
from .header import LasHeader
from .lasreader import LasReader
from .laswriter import LasWriter
from .lib import open_las as open
from .lib import read_las as read
from .lib import write_las as write
from .point import (
    ClassificationName,
    PointData,
    PointRecord0,
    PointRecord1,
    PointRecord2,
    PointRecord3,
    RGBData,
)
from .point.dims import supported_point_formats
from .vlrs import VLR

logging.getLogger(__name__).addHandler(logging.NullHandler())
