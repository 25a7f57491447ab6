from .known import GeoKeyDirectory
from .vlr import VLR, VLR_HEADER_SIZE
from .vlrlist import VLRList
