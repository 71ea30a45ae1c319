# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for png2webp

Every error raised while converting a file derives from Png2WebPError,
so callers can skip a failed file with a single except clause.

Copyright 2025 DNAi inc.
"""

from typing import Optional


class Png2WebPError(Exception):
    """
    Base exception for all png2webp errors.

    All png2webp exceptions inherit from this class, allowing
    catch-all error handling for any conversion failure.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.

        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class SourceDecodeError(Png2WebPError):
    """
    Raised when the source image cannot be decoded.

    This exception is raised when:
    - The PNG signature is missing
    - A chunk is truncated or fails its CRC check
    - The IHDR chunk is missing or misplaced
    - The pixel data cannot be decoded by the codec
    """
    pass


class UnsupportedBitstreamFormatError(Png2WebPError):
    """
    Raised when the encoder produced a WebP without a VP8/VP8L bitstream chunk.
    """
    pass


class ContainerParseError(Png2WebPError):
    """
    Raised when the encoder output is not a well-formed RIFF/WEBP container.
    """
    pass


class ContainerWriteError(Png2WebPError):
    """
    Raised when a value cannot be represented in the output container.

    This exception is raised when:
    - Canvas dimensions fall outside 1..2^24
    - A chunk payload does not fit a 32-bit length field
    """
    pass


class ConversionError(Png2WebPError):
    """
    Raised when converting a single file fails.

    Carries the source path and the stage that failed; the underlying
    error is chained as ``__cause__``.
    """
    def __init__(self, message: str = "", source: Optional[str] = None, stage: Optional[str] = None):
        self.source = source
        self.stage = stage
        super().__init__(message)


class EncoderError(Png2WebPError):
    """
    Raised when the pixel codec fails to produce a lossless WebP bitstream.
    """
    pass
