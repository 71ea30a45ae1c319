"""Builders for fabricated PNG and WebP test inputs."""

import struct
import zlib

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


def png_chunk(chunk_type: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(chunk_type + data) & 0xFFFFFFFF
    return struct.pack('>I', len(data)) + chunk_type + data + struct.pack('>I', crc)


def text_chunk(keyword: str, text: str) -> bytes:
    return png_chunk(b'tEXt', keyword.encode('latin-1') + b'\x00' + text.encode('latin-1'))


def make_png(width=2, height=3, before_idat=(), after_idat=()) -> bytes:
    """Build a valid 8-bit RGB PNG with extra chunks around the IDAT."""
    ihdr = struct.pack('>IIBBBBB', width, height, 8, 2, 0, 0, 0)
    rows = b''.join(b'\x00' + bytes(range(3 * width)) for _ in range(height))
    return (PNG_SIGNATURE
            + png_chunk(b'IHDR', ihdr)
            + b''.join(before_idat)
            + png_chunk(b'IDAT', zlib.compress(rows))
            + b''.join(after_idat)
            + png_chunk(b'IEND', b''))


def riff_chunk(fourcc: bytes, payload: bytes) -> bytes:
    pad = b'\x00' if len(payload) % 2 else b''
    return fourcc + struct.pack('<I', len(payload)) + payload + pad


def make_webp(*chunks: bytes) -> bytes:
    body = b'WEBP' + b''.join(chunks)
    return b'RIFF' + struct.pack('<I', len(body)) + body
