import logging

from . import known
from .vlr import VLR

logger = logging.getLogger(__name__)


class VLRList:
    """Class responsible for managing the vlrs"""

    def __init__(self, vlrs=None):
        self.vlrs = list(vlrs) if vlrs is not None else []

    def append(self, vlr):
        """append a vlr to the list

        Parameters
        ----------
        vlr: laskit.vlrs.vlr.VLR
        """
        self.vlrs.append(vlr)

    def extend(self, vlr_list):
        """append all elements of the vlr_list into self"""
        self.vlrs.extend(vlr_list)

    def get_by_id(self, user_id="", record_ids=(None,)):
        """Function to get vlrs by user_id and/or record_ids.
        Always returns a list even if only one vlr matches the user_id and record_id

        >>> vlrs = VLRList([VLR("LASF_Projection", 34735), VLR("LASF_Projection", 34736)])
        >>> vlrs.get_by_id("LASF_Projection", (34736,))
        [<VLR(user_id: 'LASF_Projection', record_id: '34736', data len: 0)>]
        >>> vlrs.get_by_id(record_ids=(1,))
        []

        Parameters
        ----------
        user_id: str, optional
                 the user id
        record_ids: iterable of int, optional
                    THe record ids of the vlr(s) you wish to get

        Returns
        -------
        :py:class:`list`
            a list of vlrs matching the user_id and records_ids

        """
        if user_id != "" and record_ids != (None,):
            return [
                vlr
                for vlr in self.vlrs
                if vlr.user_id == user_id and vlr.record_id in record_ids
            ]
        else:
            return [
                vlr
                for vlr in self.vlrs
                if vlr.user_id == user_id or vlr.record_id in record_ids
            ]

    def index(self, user_id, record_id):
        for i, v in enumerate(self.vlrs):
            if v.user_id == user_id and v.record_id == record_id:
                return i
        raise ValueError(
            "VLR (user_id: '{}', record_id: {}) is not in the VLR list".format(
                user_id, record_id
            )
        )

    def geo_key_directory(self):
        """Returns the decoded GeoKeyDirectory of the projection VLRs,
        None if there is none
        """
        vlrs = self.get_by_id(
            known.PROJECTION_USER_ID, (known.GEO_KEY_DIRECTORY_RECORD_ID,)
        )
        if not vlrs:
            return None
        return known.GeoKeyDirectory.from_record_data(vlrs[0].record_data)

    def size_in_bytes(self):
        """Number of bytes the vlrs take once written"""
        return sum(vlr.size_in_bytes() for vlr in self.vlrs)

    def copy(self):
        return VLRList(self.vlrs)

    def __iter__(self):
        yield from iter(self.vlrs)

    def __getitem__(self, item):
        return self.vlrs[item]

    def __len__(self):
        return len(self.vlrs)

    def __eq__(self, other):
        if isinstance(other, VLRList):
            return self.vlrs == other.vlrs
        if isinstance(other, list):
            return self.vlrs == other
        return NotImplemented

    def __repr__(self):
        return "[{}]".format(", ".join(repr(vlr) for vlr in self.vlrs))

    def __str__(self):
        return "\n".join(
            "VLR {}:\n{}".format(i + 1, vlr) for i, vlr in enumerate(self.vlrs)
        )

    @classmethod
    def read_from(cls, buffer, offset, num_to_read):
        """Reads num_to_read vlrs, back to back, starting at offset

        Parameters
        ----------
        buffer : bytes or bytearray
                 the whole file content
        offset : int
                 where the first vlr starts
        num_to_read : int
                      number of vlrs to be read

        Returns
        -------
        laskit.vlrs.vlrlist.VLRList
            List of vlrs

        """
        vlrlist = cls()
        for _ in range(num_to_read):
            vlr = VLR.read_from(buffer, offset)
            offset += vlr.size_in_bytes()
            vlrlist.append(vlr)
        logger.debug("Read {} vlrs, they end at offset {}".format(num_to_read, offset))
        return vlrlist

    def write_to(self, buffer, offset):
        """Writes the vlrs back to back starting at offset

        Returns
        -------
        int
            the number of bytes written
        """
        bytes_written = 0
        for vlr in self.vlrs:
            bytes_written += vlr.write_to(buffer, offset + bytes_written)
        return bytes_written
