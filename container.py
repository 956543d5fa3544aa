"""
On-disk container for a Huffman-compressed message.

Layout (all integers little-endian):
    [4B]  MAGIC "HUF1"
    [8B]  original_bit_length (uint64)
    [4B]  num_symbols         (uint32)
    [12B each] (code point uint32, count uint64), sorted by code point
    [8B]  payload_length      (uint64)
    [N B] packed bytes, MSB-first bit order (see bitpack.py)

The frequency table always travels with the payload: the decoder rebuilds
the tree from it.
"""

import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Union

from errors import CorruptContainerError

logger = logging.getLogger(__name__)

MAGIC = b"HUF1"
HEADER = struct.Struct("<4sQI")   # magic, original_bit_length, num_symbols
ENTRY = struct.Struct("<IQ")      # code point, count
PAYLOAD_LEN = struct.Struct("<Q")

MAX_CODE_POINT = 0x10FFFF
UINT32_MAX = 2 ** 32 - 1
UINT64_MAX = 2 ** 64 - 1


@dataclass(frozen=True)
class HuffmanContainer:
    original_bit_length: int
    frequency_table: Dict[str, int] = field(default_factory=dict)
    packed: bytes = b""


def _valid_code_point(cp: int) -> bool:
    return cp <= MAX_CODE_POINT and not (0xD800 <= cp <= 0xDFFF)


def serialize(original_bit_length: int, frequency_table: Dict[str, int], packed: bytes) -> bytes:
    """
    Rejects with ValueError anything deserialize() would refuse to read back.
    """
    if not 0 <= original_bit_length <= UINT64_MAX:
        raise ValueError(f"original_bit_length must fit in uint64, got {original_bit_length}")
    expected_payload = (original_bit_length + 7) // 8
    if len(packed) != expected_payload:
        raise ValueError(
            f"{original_bit_length} bits need {expected_payload} payload bytes, found {len(packed)}")
    if len(frequency_table) > UINT32_MAX:
        raise ValueError(f"frequency table has {len(frequency_table)} symbols, at most {UINT32_MAX} fit")

    out = bytearray(HEADER.pack(MAGIC, original_bit_length, len(frequency_table)))
    for symbol in sorted(frequency_table):
        if len(symbol) != 1:
            raise ValueError(f"frequency table keys must be single characters, got {symbol!r}")
        if not _valid_code_point(ord(symbol)):
            raise ValueError(f"symbol U+{ord(symbol):04X} is not a Unicode scalar value")
        count = frequency_table[symbol]
        if not 0 <= count <= UINT64_MAX:
            raise ValueError(f"count for U+{ord(symbol):04X} must fit in uint64, got {count}")
        out += ENTRY.pack(ord(symbol), count)
    out += PAYLOAD_LEN.pack(len(packed))
    out += packed

    logger.debug("serialized container: %d bits, %d symbols, %d payload bytes, %d total",
                 original_bit_length, len(frequency_table), len(packed), len(out))
    return bytes(out)


def deserialize(blob: bytes) -> HuffmanContainer:
    if len(blob) < HEADER.size:
        raise CorruptContainerError(
            f"container header needs {HEADER.size} bytes, found {len(blob)}")

    magic, bit_length, num_symbols = HEADER.unpack_from(blob, 0)
    if magic != MAGIC:
        raise CorruptContainerError(f"bad magic: expected {MAGIC!r}, found {magic!r}")
    offset = HEADER.size

    table_end = offset + num_symbols * ENTRY.size
    if table_end + PAYLOAD_LEN.size > len(blob):
        raise CorruptContainerError(
            f"frequency table of {num_symbols} symbols needs {table_end + PAYLOAD_LEN.size} bytes, "
            f"found {len(blob)}")

    table: Dict[str, int] = {}
    for _ in range(num_symbols):
        cp, count = ENTRY.unpack_from(blob, offset)
        offset += ENTRY.size
        if not _valid_code_point(cp):
            raise CorruptContainerError(f"invalid code point U+{cp:X} in frequency table")
        symbol = chr(cp)
        if symbol in table:
            raise CorruptContainerError(f"duplicate symbol U+{cp:04X} in frequency table")
        table[symbol] = count

    (payload_len,) = PAYLOAD_LEN.unpack_from(blob, offset)
    offset += PAYLOAD_LEN.size
    remaining = len(blob) - offset
    if payload_len != remaining:
        raise CorruptContainerError(
            f"payload length field says {payload_len} bytes, found {remaining}")

    expected_payload = (bit_length + 7) // 8
    if payload_len != expected_payload:
        raise CorruptContainerError(
            f"{bit_length} bits need {expected_payload} payload bytes, found {payload_len}")

    return HuffmanContainer(bit_length, table, bytes(blob[offset:]))


def write_container(path: Union[str, Path], container: HuffmanContainer) -> int:
    blob = serialize(container.original_bit_length, container.frequency_table, container.packed)
    with open(path, "wb") as f:
        f.write(blob)
    return len(blob)


def read_container(path: Union[str, Path]) -> HuffmanContainer:
    with open(path, "rb") as f:
        blob = f.read()
    return deserialize(blob)
