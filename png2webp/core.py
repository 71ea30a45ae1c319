# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Core conversion pipeline

decode source -> encode lossless WebP -> read the annotation ->
  no annotation: the encoder output is returned untouched
  annotation:    VP8X + bitstream + EXIF(UserComment) are reassembled

The codec and the annotation reader are plain callables so they can be
replaced with fakes that work on fabricated bytes.

Copyright 2025 DNAi inc.
"""

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from png2webp import codec
from png2webp.exceptions import ConversionError, Png2WebPError
from png2webp.exif_writer import build_user_comment_exif
from png2webp.png_parser import DEFAULT_KEYWORD, read_text_annotation
from png2webp.webp_writer import assemble_webp, find_bitstream_chunk

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes], codec.SourceImage]
Encoder = Callable[[codec.SourceImage], bytes]
AnnotationReader = Callable[[bytes, str], Optional[str]]

OUTPUT_SUFFIX = '.webp'

_umask_lock = threading.Lock()


class Converter:
    """
    Converts PNG images to lossless WebP, keeping the text annotation.

    Example:
        >>> converter = Converter()
        >>> converter.convert_file('00012-1234.png')
        PosixPath('00012-1234.webp')
    """

    def __init__(
        self,
        keyword: str = DEFAULT_KEYWORD,
        decoder: Decoder = codec.decode,
        encoder: Encoder = codec.encode_lossless,
        annotation_reader: AnnotationReader = read_text_annotation,
    ):
        """
        Initialize the converter.

        Args:
            keyword: tEXt keyword whose value becomes the EXIF UserComment
            decoder: Turns source bytes into a SourceImage
            encoder: Turns a SourceImage into a simple-format lossless WebP
            annotation_reader: Returns the annotation for (source bytes, keyword)
        """
        self.keyword = keyword
        self.decoder = decoder
        self.encoder = encoder
        self.annotation_reader = annotation_reader

    def convert(self, data: bytes, source: str = '<bytes>') -> bytes:
        """
        Convert source image data to WebP data.

        Args:
            data: Source image file data
            source: Name used in error messages

        Returns:
            Complete WebP file as bytes

        Raises:
            ConversionError: If any stage fails; the cause is chained
        """
        stage = 'decode'
        try:
            image = self.decoder(data)
            stage = 'encode'
            webp_data = self.encoder(image)
            stage = 'metadata'
            annotation = self.annotation_reader(data, self.keyword)
            if annotation is None:
                logger.debug("%s: no annotation, keeping encoder output", source)
                return webp_data

            stage = 'assemble'
            bitstream = find_bitstream_chunk(webp_data)
            exif = build_user_comment_exif(annotation)
            return assemble_webp(bitstream, image.width, image.height, exif)
        except Png2WebPError as e:
            raise ConversionError(f"{stage} failed: {e}", source=source, stage=stage) from e

    def convert_stream(self, reader: BinaryIO, writer: BinaryIO, source: str = '<stream>') -> None:
        """Read all of reader, convert it and write the result to writer."""
        webp_data = self.convert(reader.read(), source)
        writer.write(webp_data)

    def convert_file(
        self,
        source_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Convert a file and save it next to the source with a .webp extension.

        The output is written to a temporary file and moved into place, so a
        failed conversion leaves no output behind.

        Returns:
            Path to the written WebP file
        """
        source_path = Path(source_path)
        if output_path is None:
            output_path = output_path_for(source_path)
        output_path = Path(output_path)

        try:
            data = source_path.read_bytes()
        except OSError as e:
            raise ConversionError(f"read failed: {e}",
                                  source=str(source_path), stage='read') from e

        webp_data = self.convert(data, str(source_path))

        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f'.{output_path.name}.', dir=str(output_path.parent))
            with os.fdopen(fd, 'wb') as f:
                f.write(webp_data)
            # mkstemp creates 0600; give the output the mode open() would
            os.chmod(tmp_name, _default_file_mode())
            os.replace(tmp_name, output_path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ConversionError(f"write of {output_path} failed: {e}",
                                  source=str(source_path), stage='write') from e
        return output_path


def _default_file_mode() -> int:
    """Return 0o666 masked by the process umask."""
    with _umask_lock:
        umask = os.umask(0)
        os.umask(umask)
    return 0o666 & ~umask


def output_path_for(source_path: Union[str, Path]) -> Path:
    """Return source_path with its extension replaced by .webp."""
    return Path(source_path).with_suffix(OUTPUT_SUFFIX)


def convert(data: bytes, keyword: str = DEFAULT_KEYWORD) -> bytes:
    """Convert PNG data to WebP data with the default Pillow codec."""
    return Converter(keyword=keyword).convert(data)


def convert_file(
    source_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    keyword: str = DEFAULT_KEYWORD
) -> Path:
    """Convert a PNG file to a WebP file with the default Pillow codec."""
    return Converter(keyword=keyword).convert_file(source_path, output_path)
