from .. import errors, lasio
from .known import describe_record_data

VLR_HEADER_SIZE = 54
MAX_VLR_RECORD_DATA_LEN = 2 ** 16 - 1
USER_ID_LEN = 16
DESCRIPTION_LEN = 32


class VLR:
    """A Variable Length Record

    The record_data is kept as raw bytes, setting it keeps
    record_length_after_header in sync.
    """

    def __init__(self, user_id="", record_id=0, description="", record_data=b"", reserved=0):
        self.reserved = reserved
        self.user_id = user_id
        self.record_id = record_id
        self.description = description
        self.record_data = record_data

    @property
    def record_data(self):
        return self._record_data

    @record_data.setter
    def record_data(self, value):
        value = bytes(value)
        if len(value) > MAX_VLR_RECORD_DATA_LEN:
            raise OverflowError(
                "VLR record data length ({}) exceeds maximum ({})".format(
                    len(value), MAX_VLR_RECORD_DATA_LEN
                )
            )
        self._record_data = value
        self.record_length_after_header = len(value)

    def size_in_bytes(self):
        return VLR_HEADER_SIZE + self.record_length_after_header

    @classmethod
    def read_from(cls, buffer, offset):
        """Decodes the VLR starting at offset

        Raises
        ------
        errors.LaskitError
            if the buffer ends before the VLR does
        """
        if offset + VLR_HEADER_SIZE > len(buffer):
            raise errors.LaskitError(
                "Buffer too small to contain a VLR header at offset {}: "
                "expected {} bytes, got {}".format(offset, VLR_HEADER_SIZE, len(buffer) - offset)
            )
        reserved = lasio.read(buffer, offset, 'uint16')
        user_id = lasio.read_str(buffer, offset + 2, USER_ID_LEN)
        record_id = lasio.read(buffer, offset + 18, 'uint16')
        record_length = lasio.read(buffer, offset + 20, 'uint16')
        description = lasio.read_str(buffer, offset + 22, DESCRIPTION_LEN)
        data_start = offset + VLR_HEADER_SIZE
        record_data = lasio.read_bytes(buffer, data_start, record_length)
        if len(record_data) != record_length:
            raise errors.LaskitError(
                "VLR (user_id: '{}', record_id: {}) announces {} bytes of data, "
                "only {} are available".format(user_id, record_id, record_length, len(record_data))
            )
        return cls(user_id, record_id, description, record_data, reserved=reserved)

    def write_to(self, buffer, offset):
        """Encodes the VLR in the buffer

        Returns
        -------
        int
            number of bytes written
        """
        start = offset
        offset += lasio.write(buffer, offset, self.reserved, 'uint16')
        offset += lasio.write_str(buffer, offset, self.user_id, USER_ID_LEN)
        offset += lasio.write(buffer, offset, self.record_id, 'uint16')
        offset += lasio.write(buffer, offset, self.record_length_after_header, 'uint16')
        offset += lasio.write_str(buffer, offset, self.description, DESCRIPTION_LEN)
        offset += lasio.write_bytes(buffer, offset, self.record_data)
        return offset - start

    def __eq__(self, other):
        if not isinstance(other, VLR):
            return NotImplemented
        return (
            self.reserved == other.reserved
            and self.record_id == other.record_id
            and self.user_id == other.user_id
            and self.description == other.description
            and self.record_data == other.record_data
        )

    def __repr__(self):
        return "<{}(user_id: '{}', record_id: '{}', data len: {})>".format(
            self.__class__.__name__, self.user_id, self.record_id, len(self.record_data)
        )

    def __str__(self):
        return "\n".join(
            (
                "\tReserved: {}".format(self.reserved),
                "\tUser ID: {}".format(lasio.to_display(self.user_id)),
                "\tRecord ID: {}".format(self.record_id),
                "\tRecord Length: {}".format(self.record_length_after_header),
                "\tDescription: {}".format(lasio.to_display(self.description).strip()),
                "\tData: {}".format(describe_record_data(self.record_id, self.record_data)),
            )
        )
