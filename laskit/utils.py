import logging

logger = logging.getLogger(__name__)


def encode_to_len(string: str, wanted_len: int, codec='latin-1') -> bytes:
    """Encodes the string and pads it with null bytes up to wanted_len,
    strings that are too long are truncated
    """
    encoded_str = string.encode(codec)

    missing_bytes = wanted_len - len(encoded_str)
    if missing_bytes < 0:
        logger.debug(
            "'{}' does not fit in {} bytes, truncating".format(string, wanted_len)
        )
        return encoded_str[:wanted_len]

    return encoded_str + (b"\0" * missing_bytes)
