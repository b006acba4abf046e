"""
adslot.state — journaled key/value storage, balances and codecs.
"""

from .codec import CodecError, decode_ad, encode_ad
from .journal import Journal
from .storage import StorageView

__all__ = ["Journal", "StorageView", "CodecError", "encode_ad", "decode_ad"]
