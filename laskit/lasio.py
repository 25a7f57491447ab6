""" Little-endian helpers to read and write fixed width fields at
explicit byte offsets of a buffer.

Nothing here checks bounds, callers compute the offsets from buffers
whose size they already validated.
"""
import struct

from .utils import encode_to_len

NULL_BYTE = b'\x00'

type_name_to_struct = {
    'uint8': 'B',
    'uint16': 'H',
    'uint32': 'I',
    'uint64': 'Q',
    'int8': 'b',
    'int16': 'h',
    'int32': 'i',
    'int64': 'q',
    'float': 'f',
    'double': 'd',
}

type_lengths = {
    'uint8': 1,
    'uint16': 2,
    'uint32': 4,
    'uint64': 8,
    'int8': 1,
    'int16': 2,
    'int32': 4,
    'int64': 8,
    'float': 4,
    'double': 8,
}


def _format_string(data_type, num):
    return '<{}{}'.format(num, type_name_to_struct[data_type])


def read(buffer, offset, data_type, num=1):
    """Decodes `num` values of type `data_type` starting at `offset`

    Returns a single value when num is 1, a tuple otherwise
    """
    values = struct.unpack_from(_format_string(data_type, num), buffer, offset)
    if num == 1:
        return values[0]
    return values


def write(buffer, offset, values, data_type, num=1):
    """Encodes the value(s) in the buffer starting at offset

    Returns
    -------
    int
        the number of bytes written
    """
    fmt_str = _format_string(data_type, num)
    try:
        if num > 1:
            struct.pack_into(fmt_str, buffer, offset, *values)
        else:
            struct.pack_into(fmt_str, buffer, offset, values)
    except struct.error as e:
        raise ValueError(
            "Error writing {} value '{}' at offset {}: {}".format(
                data_type, values, offset, e
            )
        )
    return type_lengths[data_type] * num


def read_bytes(buffer, offset, length):
    return bytes(buffer[offset:offset + length])


def write_bytes(buffer, offset, data):
    buffer[offset:offset + len(data)] = data
    return len(data)


def read_str(buffer, offset, width, codec='latin-1'):
    """Reads a fixed width, null padded, text field.

    Trailing padding is removed, the interior of the string is kept as is
    so that it goes back on the wire unchanged.
    """
    return read_bytes(buffer, offset, width).rstrip(NULL_BYTE).decode(codec)


def write_str(buffer, offset, string, width, codec='latin-1'):
    """Writes a text field padded with null bytes (or truncated) to `width`"""
    return write_bytes(buffer, offset, encode_to_len(string, width, codec=codec))


def to_display(string):
    """Returns the string as it should be shown to a user,
    null bytes are rendered as spaces
    """
    return string.replace('\0', ' ')
