"""
Compress and decompress byte streams with a Huffman code.

compress() makes two passes over a seekable input: one to count symbols and
one to emit code words. The tree travels as a textual header in front of the
bits, so decompress() needs nothing but the header and the bit source.
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Protocol, Union

from huffman import (CHUNK_SIZE, build_decode_table, build_huffman_tree,
                     generate_huffman_codes, stream_frequency_table)
from huffman_bitio import END_OF_STREAM, HuffmanInput, HuffmanOutput
from huffman_errors import FormatError, HuffmanError, TruncatedStreamError
from huffman_header import flatten_tree_to_header, recreate_tree_from_header

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class BitSink(Protocol):
    def write_header(self, header: str) -> None: ...

    def write_bit(self, bit: int) -> None: ...


class BitSource(Protocol):
    def read_header(self) -> str: ...

    def read_bit(self) -> int: ...


def compress(stream: BinaryIO, sink: BitSink) -> int:
    """
    Encode everything from the current position of stream into sink.

    Returns the number of bits written. An empty input writes an empty
    header and no bits.
    """
    start = stream.tell()
    ft = stream_frequency_table(stream)
    if not ft:
        logger.debug("empty input, writing empty header")
        sink.write_header("")
        return 0

    root = build_huffman_tree(ft)
    header = flatten_tree_to_header(root)
    code_map = generate_huffman_codes(root)
    logger.debug("%d distinct symbols, header is %d characters", len(ft), len(header))
    sink.write_header(header)

    stream.seek(start)
    bits_written = 0
    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
        for b in chunk:
            code = code_map.get(b)
            if code is None:
                raise HuffmanError(f"symbol {b} was not seen while counting; input changed between passes")
            for ch in code:
                sink.write_bit(1 if ch == '1' else 0)
            bits_written += len(code)

    logger.debug("wrote %d bits for %d symbols", bits_written, sum(ft.values()))
    return bits_written


def decompress(source: BitSource, stream: BinaryIO) -> int:
    """
    Decode a header and its bits from source, writing the symbols to stream.

    Returns the number of bytes written. Decoded bytes are flushed in chunks,
    so stream may hold a prefix of the data when an error is raised.
    """
    header = source.read_header()
    if not header:
        if source.read_bit() != END_OF_STREAM:
            raise FormatError("encoded bits follow an empty header")
        logger.debug("empty header, nothing to decode")
        return 0

    root = recreate_tree_from_header(header)
    decode_table = build_decode_table(generate_huffman_codes(root))
    max_len = max(len(code) for code in decode_table)

    pending = bytearray()
    written = 0
    bits = ''
    while True:
        bit = source.read_bit()
        if bit == END_OF_STREAM:
            break
        bits += '1' if bit else '0'
        symbol = decode_table.get(bits)
        if symbol is not None:
            pending.append(symbol)
            bits = ''
            if len(pending) >= CHUNK_SIZE:
                stream.write(pending)
                written += len(pending)
                pending.clear()
        elif len(bits) >= max_len:
            raise FormatError(f"bits {bits!r} match no code word")

    if bits:
        raise TruncatedStreamError(f"stream ended inside a code word ({len(bits)} dangling bits)")

    stream.write(pending)
    written += len(pending)
    logger.debug("decoded %d bytes", written)
    return written


def compress_bytes(data: bytes) -> bytes:
    sink = HuffmanOutput()
    compress(io.BytesIO(data), sink)
    return sink.getvalue()


def decompress_bytes(blob: bytes) -> bytes:
    out = io.BytesIO()
    decompress(HuffmanInput(blob), out)
    return out.getvalue()


def compress_file(src: PathLike, dst: PathLike) -> int:
    """
    Compress the file at src into dst, returning the compressed size in bytes
    """
    sink = HuffmanOutput()
    with open(src, "rb") as f:
        compress(f, sink)
    blob = sink.getvalue()
    Path(dst).write_bytes(blob)
    logger.info("compressed %s -> %s (%d bytes)", src, dst, len(blob))
    return len(blob)


def decompress_file(src: PathLike, dst: PathLike) -> int:
    """
    Decompress the file at src into dst, returning the decompressed size.

    If decoding fails, the partly written dst is removed before the error
    propagates.
    """
    source = HuffmanInput(Path(src).read_bytes())
    try:
        with open(dst, "wb") as f:
            written = decompress(source, f)
    except HuffmanError:
        Path(dst).unlink(missing_ok=True)
        raise
    logger.info("decompressed %s -> %s (%d bytes)", src, dst, written)
    return written
