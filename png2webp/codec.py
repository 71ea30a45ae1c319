# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Pixel codec backed by Pillow

Decodes the source raster and encodes it as a lossless simple-format WebP
(RIFF header plus a single VP8L chunk). Nothing here touches metadata:
Pillow is asked to write no EXIF, XMP or ICC data so the encoder output
is a bare bitstream container.

Copyright 2025 DNAi inc.
"""

import io
import logging
from dataclasses import dataclass

from PIL import Image

from png2webp.exceptions import EncoderError, SourceDecodeError

logger = logging.getLogger(__name__)


@dataclass
class SourceImage:
    """Decoded pixels and their canvas size."""
    pixels: Image.Image
    width: int
    height: int


def decode(data: bytes) -> SourceImage:
    """
    Decode source image data.

    Raises:
        SourceDecodeError: If Pillow cannot identify or load the data
    """
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise SourceDecodeError(f"Failed to decode image: {e}") from e

    # The lossless encoder takes 8-bit RGB or RGBA only
    if img.mode not in ('RGB', 'RGBA'):
        has_alpha = 'A' in img.getbands() or 'transparency' in img.info
        img = img.convert('RGBA' if has_alpha else 'RGB')

    width, height = img.size
    logger.debug("decoded %dx%d %s image", width, height, img.mode)
    return SourceImage(img, width, height)


def encode_lossless(image: SourceImage) -> bytes:
    """
    Encode pixels as a lossless WebP.

    Returns:
        A complete simple-format WebP file

    Raises:
        EncoderError: If Pillow has no WebP support or libwebp rejects the image
    """
    buf = io.BytesIO()
    try:
        image.pixels.save(buf, format='WEBP', lossless=True, exif=b'', xmp='', icc_profile=None)
    except (KeyError, OSError, ValueError) as e:
        raise EncoderError(f"Failed to create WebP encoder: {e}") from e
    webp_data = buf.getvalue()
    logger.debug("encoded %d byte lossless WebP", len(webp_data))
    return webp_data
