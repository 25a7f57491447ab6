""" The bit fields stored in one byte of a point record.

The byte is the only thing stored, sub fields are computed
from it each time they are accessed.
"""
import enum

from . import dims, packing


class ClassificationName(enum.IntEnum):
    """Point classes as defined by the LAS 1.3 specification"""

    NEVER_CLASSIFIED = 0
    UNCLASSIFIED = 1
    GROUND = 2
    LOW_VEGETATION = 3
    MEDIUM_VEGETATION = 4
    HIGH_VEGETATION = 5
    BUILDING = 6
    LOW_POINT = 7
    MODEL_KEY_POINT = 8
    WATER = 9
    RESERVED_10 = 10
    RESERVED_11 = 11
    OVERLAPPING_POINT = 12
    RESERVED_13 = 13
    RESERVED_14 = 14
    RESERVED_15 = 15
    RESERVED_16 = 16
    RESERVED_17 = 17
    RESERVED_18 = 18
    RESERVED_19 = 19
    RESERVED_20 = 20
    RESERVED_21 = 21
    RESERVED_22 = 22
    RESERVED_23 = 23
    RESERVED_24 = 24
    RESERVED_25 = 25
    RESERVED_26 = 26
    RESERVED_27 = 27
    RESERVED_28 = 28
    RESERVED_29 = 29
    RESERVED_30 = 30
    RESERVED_31 = 31


class BitField:
    def __init__(self, value=0):
        self.value = int(value)

    @property
    def value(self):
        return self._value

    @value.setter
    def value(self, value):
        if not 0 <= value <= 255:
            raise ValueError("Bit field value {} does not fit in a byte".format(value))
        self._value = int(value)

    def _get(self, mask):
        return packing.unpack(self._value, mask)

    def _set(self, mask, sub_value):
        self._value = packing.pack(self._value, int(sub_value), mask)

    def __int__(self):
        return self._value

    def __eq__(self, other):
        if isinstance(other, BitField):
            return type(self) is type(other) and self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __hash__(self):
        return hash((type(self), self._value))


class ReturnBitField(BitField):
    """return number: bits 0-2, number of returns: bits 3-5,
    scan direction flag: bit 6, edge of flight line: bit 7

    >>> field = ReturnBitField(0b1001_0010)
    >>> field.return_number, field.number_of_returns
    (2, 2)
    >>> field.edge_of_flight_line
    True
    """

    @property
    def return_number(self):
        return self._get(dims.RETURN_NUMBER_MASK)

    @return_number.setter
    def return_number(self, value):
        self._set(dims.RETURN_NUMBER_MASK, value)

    @property
    def number_of_returns(self):
        return self._get(dims.NUMBER_OF_RETURNS_MASK)

    @number_of_returns.setter
    def number_of_returns(self, value):
        self._set(dims.NUMBER_OF_RETURNS_MASK, value)

    @property
    def scan_direction_flag(self):
        return self._get(dims.SCAN_DIRECTION_FLAG_MASK) == 1

    @scan_direction_flag.setter
    def scan_direction_flag(self, value):
        self._set(dims.SCAN_DIRECTION_FLAG_MASK, bool(value))

    @property
    def edge_of_flight_line(self):
        return self._get(dims.EDGE_OF_FLIGHT_LINE_MASK) == 1

    @edge_of_flight_line.setter
    def edge_of_flight_line(self, value):
        self._set(dims.EDGE_OF_FLIGHT_LINE_MASK, bool(value))

    def __repr__(self):
        return "{{value: {}, return: {}, returns: {}, scan dir flag: {}, flightline: {}}}".format(
            self.value,
            self.return_number,
            self.number_of_returns,
            self.scan_direction_flag,
            self.edge_of_flight_line,
        )


class ClassificationBitField(BitField):
    """class code: bits 0-2, synthetic: bit 5, key point: bit 6, withheld: bit 7"""

    @property
    def classification(self):
        return self._get(dims.CLASSIFICATION_MASK)

    @classification.setter
    def classification(self, value):
        self._set(dims.CLASSIFICATION_MASK, value)

    @property
    def classification_name(self):
        return ClassificationName(self.classification)

    @property
    def synthetic(self):
        return self._get(dims.SYNTHETIC_MASK) == 1

    @synthetic.setter
    def synthetic(self, value):
        self._set(dims.SYNTHETIC_MASK, bool(value))

    @property
    def key_point(self):
        return self._get(dims.KEY_POINT_MASK) == 1

    @key_point.setter
    def key_point(self, value):
        self._set(dims.KEY_POINT_MASK, bool(value))

    @property
    def withheld(self):
        return self._get(dims.WITHHELD_MASK) == 1

    @withheld.setter
    def withheld(self, value):
        self._set(dims.WITHHELD_MASK, bool(value))

    def __repr__(self):
        return "{{value: {}, name: {}, synthetic: {}, keypoint: {}, withheld: {}}}".format(
            self.value,
            self.classification_name.name,
            self.synthetic,
            self.key_point,
            self.withheld,
        )
