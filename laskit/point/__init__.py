from .dims import supported_point_formats
from .fields import ClassificationBitField, ClassificationName, ReturnBitField
from .record import (
    PackedPointRecord,
    PointData,
    PointRecord0,
    PointRecord1,
    PointRecord2,
    PointRecord3,
    RGBData,
    XYZData,
    XYZIData,
    decode_extension,
    decode_point,
    encode_point,
)
