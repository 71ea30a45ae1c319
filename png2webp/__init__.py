# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
png2webp - Lossless PNG to WebP conversion that keeps generation parameters

Stable Diffusion front-ends store the prompt and sampler settings in a PNG
tEXt chunk named "parameters". WebP has no such chunk, so the text is
carried over as an EXIF UserComment inside an extended-format WebP.

The EXIF block and the RIFF container are written natively in Python;
Pillow is only used to decode the PNG pixels and encode the VP8L bitstream.

Copyright 2025 DNAi inc.
"""

__version__ = "0.1.0"
__author__ = "DNAi inc."

from png2webp.core import Converter, convert, convert_file, output_path_for
from png2webp.exceptions import (
    Png2WebPError,
    SourceDecodeError,
    UnsupportedBitstreamFormatError,
    ContainerParseError,
    ContainerWriteError,
    EncoderError,
    ConversionError,
)
from png2webp.exif_writer import build_user_comment_exif, read_user_comment
from png2webp.png_parser import DEFAULT_KEYWORD, read_text_annotation
from png2webp.webp_writer import assemble_webp, build_vp8x_payload, find_bitstream_chunk
from png2webp.batch import BatchResult, convert_all, iter_png_files

__all__ = [
    "Converter",
    "convert",
    "convert_file",
    "output_path_for",
    "Png2WebPError",
    "SourceDecodeError",
    "UnsupportedBitstreamFormatError",
    "ContainerParseError",
    "ContainerWriteError",
    "EncoderError",
    "ConversionError",
    "build_user_comment_exif",
    "read_user_comment",
    "DEFAULT_KEYWORD",
    "read_text_annotation",
    "assemble_webp",
    "build_vp8x_payload",
    "find_bitstream_chunk",
    "BatchResult",
    "convert_all",
    "iter_png_files",
]
