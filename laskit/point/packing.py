""" This module contains functions to pack and unpack point dimensions

They work on python ints (one point) as well as on numpy arrays
"""
import numpy as np


def least_significant_bit(val):
    """ Return the least significant bit
    """
    return (val & -val).bit_length() - 1


def unpack(source, mask, dtype=np.uint8):
    """ Unpack sub field using its mask

    Parameters:
    ----------
    source : int or numpy.ndarray
        The composed value(s)
    mask : mask (ie: 0b00001111)
        Mask of the sub field to be extracted from the source
    Returns
    -------
    int or numpy.ndarray
        The sub field value(s)
    """
    lsb = least_significant_bit(mask)
    if isinstance(source, np.ndarray):
        return ((source & mask) >> lsb).astype(dtype)
    return (int(source) & mask) >> lsb


def pack(composed, sub_field_value, mask):
    """ Packs a sub field's value into the composed value using a mask

    Parameters:
    ----------
    composed : int or numpy.ndarray
        The value in which the sub field will be packed into
    sub_field_value : int or numpy.ndarray
        sub field value to pack
    mask : mask (ie: 0b00001111)
        Mask of the sub field

    Returns
    -------
    int or numpy.ndarray
        the new composed value

    Raises
    ------
    OverflowError
        If the sub field value is greater than its mask's number of bits
        allows
    """
    lsb = least_significant_bit(mask)
    max_value = int(mask >> lsb)
    if np.max(sub_field_value) > max_value:
        raise OverflowError(
            "value ({}) is greater than allowed (max: {})".format(
                np.max(sub_field_value), max_value
            )
        )
    if np.min(sub_field_value) < 0:
        raise OverflowError(
            "value ({}) is negative".format(np.min(sub_field_value))
        )
    if isinstance(composed, np.ndarray):
        cleared = composed & ~np.array(mask, dtype=composed.dtype)
        shifted = (np.asarray(sub_field_value).astype(composed.dtype) << lsb) & mask
        return cleared | shifted.astype(composed.dtype)
    return (int(composed) & ~mask & 0xFF) | ((int(sub_field_value) << lsb) & mask)
