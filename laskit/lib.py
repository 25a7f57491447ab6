""" 'Entry point' of the library, Contains the various functions meant to be
used directly by a user
"""
from . import errors
from .lasreader import LasReader
from .laswriter import LasWriter


def open_las(source, mode="r", header=None, recompute_offsets=True):
    """Opens a LAS file for reading or writing

        >>> import io
        >>> with open_las(io.BytesIO(), mode="w") as writer:
        ...     writer.header.point_format
        0
        >>> open_las("points.las", mode="a")
        Traceback (most recent call last):
        laskit.errors.UnsupportedFileMode: Unknown mode 'a', use 'r' to read or 'w' to write

    Parameters
    ----------
    source: str or pathlib.Path or file object
        a filename, or a binary stream
    mode: Optional, the mode to open the file "r" for reading, "w" for writing
          "r" by default
    header: Optional, the header to use when opening in write mode.
    recompute_offsets: Optional, only used in write mode, see LasWriter

    Returns
    -------
    laskit.lasreader.LasReader or laskit.laswriter.LasWriter
    """
    if mode == "r":
        if header is not None:
            raise errors.LaskitError(
                "header argument is not used when opening in read mode, "
                "did you meant to open in write mode ?"
            )
        return LasReader(source)
    elif mode == "w":
        return LasWriter(source, header=header, recompute_offsets=recompute_offsets)
    else:
        raise errors.UnsupportedFileMode(
            "Unknown mode '{}', use 'r' to read or 'w' to write".format(mode)
        )


def read_las(source):
    """Entry point for reading las data in laskit

    Reads the whole file into memory.

    Parameters
    ----------
    source : str or pathlib.Path or io.BytesIO or bytes
        The source to read data from

    Returns
    -------
    laskit.lasreader.LasReader
    """
    if isinstance(source, (bytes, bytearray)):
        return LasReader.from_buffer(source)
    return open_las(source)


def write_las(destination, header, vlrs, point_records, recompute_offsets=True):
    """Writes a whole file at once

    Parameters
    ----------
    destination: str or pathlib.Path or file object
    header: laskit.header.LasHeader
        the header to start from, the point records must be of its point format
    vlrs: iterable of laskit.vlrs.vlr.VLR
    point_records: iterable of PointRecord0/1/2/3

    Returns
    -------
    laskit.laswriter.LasWriter
        the writer, already written, its header describes what was written
    """
    writer = LasWriter(destination, header=header, recompute_offsets=recompute_offsets)
    for vlr in vlrs:
        writer.add_vlr(vlr)
    for point_record in point_records:
        writer.add_point_record(point_record)
    writer.write()
    return writer
