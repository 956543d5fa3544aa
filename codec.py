"""
Text <-> container round trip.

compress():   text -> frequency table -> tree -> codes -> bitstring -> packed bytes -> container
decompress(): container -> tree rebuilt from the stored table -> unpacked bits (trimmed) -> text
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import bitpack
import container as container_mod
import huffman as huff
from errors import CorruptContainerError, UnknownSymbolError

logger = logging.getLogger(__name__)


def encode_text(text: str, frequency_table: Optional[Dict[str, int]] = None) -> Tuple[str, Dict[str, int]]:
    """
    Returns (bitstring, frequency_table). Empty text gives an empty bitstring.

    With frequency_table given, codes come from that table instead of the
    text; a symbol missing from it raises UnknownSymbolError.
    """
    ft = huff.frequency_table(text) if frequency_table is None else frequency_table
    if not text:
        return "", ft
    if not ft:
        raise UnknownSymbolError(text[0], 0)
    tree = huff.build_huffman_tree(ft)
    code_map = huff.generate_huffman_codes(tree)
    logger.debug("code lengths: %s", {s: len(c) for s, c in sorted(code_map.items())})
    return huff.huffman_encode(text, code_map), ft


def decode_text(bitstring: str, frequency_table: Dict[str, int]) -> str:
    if not frequency_table:
        if bitstring:
            raise CorruptContainerError(
                f"empty frequency table but {len(bitstring)} payload bits")
        return ""
    tree = huff.build_huffman_tree(frequency_table)
    return huff.huffman_decode(bitstring, tree)


def compress_to_container(text: str) -> container_mod.HuffmanContainer:
    bitstring, ft = encode_text(text)
    packed = bitpack.pack_bits(bitstring)
    logger.debug("encoded %d symbols into %d bits (%d pad bits)",
                 len(text), len(bitstring), bitpack.padding_for(len(bitstring)))
    return container_mod.HuffmanContainer(len(bitstring), ft, packed)


def compress(text: str) -> bytes:
    c = compress_to_container(text)
    return container_mod.serialize(c.original_bit_length, c.frequency_table, c.packed)


def decompress(blob: bytes) -> str:
    c = container_mod.deserialize(blob)
    return decompress_container(c)


def decompress_container(c: container_mod.HuffmanContainer) -> str:
    if c.frequency_table and c.original_bit_length == 0:
        raise CorruptContainerError(
            f"frequency table holds {len(c.frequency_table)} symbols but the payload has 0 bits")

    bits = bitpack.unpack_bits(c.packed)
    if len(bits) < c.original_bit_length:
        raise CorruptContainerError(
            f"expected at least {c.original_bit_length} bits, found {len(bits)}")
    text = decode_text(bits[:c.original_bit_length], c.frequency_table)

    expected = sum(c.frequency_table.values())
    if len(text) != expected:
        raise CorruptContainerError(
            f"frequency table counts {expected} symbols, decoded {len(text)}")
    return text


def compress_file(src: Union[str, Path], dst: Union[str, Path]) -> int:
    with open(src, "r", encoding="utf-8", newline="") as f:
        text = f.read()
    return container_mod.write_container(dst, compress_to_container(text))


def decompress_file(src: Union[str, Path], dst: Union[str, Path]) -> int:
    text = decompress_container(container_mod.read_container(src))
    with open(dst, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    return len(text)
