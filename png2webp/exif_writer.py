# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF UserComment block writer

This module builds the smallest TIFF structure that carries a text
annotation as an EXIF UserComment:

    offset  0  TIFF header      'MM', 42, IFD0 offset (8)
    offset  8  IFD0             1 entry: ExifOffset -> 26, next IFD 0
    offset 26  Exif IFD         1 entry: UserComment, UNDEFINED, count n -> 40
    offset 40  comment payload  'UNICODE\\0' + UTF-16BE text

All offsets are relative to the TIFF header, which is byte 0 of the block.

Copyright 2025 DNAi inc.
"""

import struct
from enum import IntEnum

from png2webp.exceptions import ContainerParseError


class ExifTagType(IntEnum):
    """TIFF field types used by the UserComment block."""
    LONG = 4
    UNDEFINED = 7


TAG_EXIF_OFFSET = 0x8769
TAG_USER_COMMENT = 0x9286

UNICODE_PREFIX = b'UNICODE\x00'

TIFF_HEADER_SIZE = 8
IFD_ENTRY_SIZE = 12
IFD0_OFFSET = TIFF_HEADER_SIZE
# count (2) + one entry + next IFD offset (4)
EXIF_IFD_OFFSET = IFD0_OFFSET + 2 + IFD_ENTRY_SIZE + 4
# count (2) + one entry, payload follows directly
USER_COMMENT_OFFSET = EXIF_IFD_OFFSET + 2 + IFD_ENTRY_SIZE


class UserCommentEXIFWriter:
    """
    Writes a TIFF/EXIF block holding one UserComment.

    The layout is fixed: IFD0 always has exactly one entry pointing at an
    Exif IFD which always has exactly one entry, so every offset is a
    constant. The block is big-endian.
    """

    endian = '>'

    def build(self, comment: str) -> bytes:
        """
        Build the EXIF block for comment.

        Args:
            comment: Any string; empty strings and astral code points are fine

        Returns:
            TIFF header, IFD0, Exif IFD and comment payload, without padding
        """
        payload = self._encode_user_comment(comment)

        exif_data = bytearray()
        exif_data.extend(self._build_tiff_header())
        exif_data.extend(self._write_ifd(TAG_EXIF_OFFSET, ExifTagType.LONG, 1,
                                         struct.pack(f'{self.endian}I', EXIF_IFD_OFFSET)))
        exif_data.extend(struct.pack(f'{self.endian}I', 0))  # no IFD1

        exif_data.extend(self._write_ifd(TAG_USER_COMMENT, ExifTagType.UNDEFINED, len(payload),
                                         struct.pack(f'{self.endian}I', USER_COMMENT_OFFSET)))
        exif_data.extend(payload)
        return bytes(exif_data)

    def _build_tiff_header(self) -> bytes:
        header = b'MM'
        header += struct.pack(f'{self.endian}H', 42)
        header += struct.pack(f'{self.endian}I', IFD0_OFFSET)
        return header

    def _write_ifd(self, tag_id: int, tag_type: int, count: int, value: bytes) -> bytes:
        """Write a directory with a single entry (count, tag, type, count, value)."""
        ifd = bytearray()
        ifd.extend(struct.pack(f'{self.endian}H', 1))
        ifd.extend(struct.pack(f'{self.endian}HHI', tag_id, tag_type, count))
        ifd.extend(value)
        return bytes(ifd)

    @staticmethod
    def _encode_user_comment(comment: str) -> bytes:
        # surrogatepass lets lone surrogates from non-UTF-8 sources through as code units
        return UNICODE_PREFIX + comment.encode('utf-16-be', errors='surrogatepass')


def build_user_comment_exif(comment: str) -> bytes:
    """Build a big-endian EXIF block carrying comment as UserComment."""
    return UserCommentEXIFWriter().build(comment)


def read_user_comment(exif_data: bytes) -> str:
    """
    Decode the UserComment of a block written by build_user_comment_exif.

    The offsets are followed rather than assumed, so this also checks that
    the header points at IFD0 and IFD0 points at the Exif IFD.

    Raises:
        ContainerParseError: If the block does not have the expected shape
    """
    if exif_data[:4] != b'MM\x00\x2a':
        raise ContainerParseError("EXIF block is not a big-endian TIFF structure")
    try:
        ifd0_offset = struct.unpack('>I', exif_data[4:8])[0]
        count, tag_id, _, _, exif_ifd_offset = struct.unpack(
            '>HHHII', exif_data[ifd0_offset:ifd0_offset + 14])
        if count != 1 or tag_id != TAG_EXIF_OFFSET:
            raise ContainerParseError("IFD0 does not hold a single ExifOffset entry")

        count, tag_id, tag_type, length, value_offset = struct.unpack(
            '>HHHII', exif_data[exif_ifd_offset:exif_ifd_offset + 14])
    except struct.error as e:
        raise ContainerParseError(f"Truncated EXIF block: {e}") from e
    if count != 1 or tag_id != TAG_USER_COMMENT or tag_type != ExifTagType.UNDEFINED:
        raise ContainerParseError("Exif IFD does not hold a single UserComment entry")

    payload = exif_data[value_offset:value_offset + length]
    if len(payload) != length or not payload.startswith(UNICODE_PREFIX):
        raise ContainerParseError("UserComment payload is truncated or not UNICODE")
    return payload[len(UNICODE_PREFIX):].decode('utf-16-be', errors='surrogatepass')
