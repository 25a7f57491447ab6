""" All the custom exceptions types
"""


class LaskitError(Exception):
    pass


class InvalidSignature(LaskitError):
    pass


class WrongFileExtension(LaskitError):
    pass


class ReadOnlyViolation(LaskitError):
    pass


class UnsupportedFileMode(LaskitError):
    pass


class PointFormatNotSupported(LaskitError):
    pass


class IncompatibleDataFormat(LaskitError):
    pass
