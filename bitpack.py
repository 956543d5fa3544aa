"""
Bit packing for Huffman bitstrings.

Bit order is MSB-first: the first character of every 8-bit group becomes
bit 7 of its byte, so pack_bits("01000001") == b"A". The last byte is padded
on the right with 0 bits. unpack_bits() returns whole bytes, padding
included; trimming back to the real payload length is the caller's job.
"""


def padding_for(bit_length: int) -> int: # number of 0 bits needed to reach a byte boundary
    return (8 - bit_length % 8) % 8


def pack_bits(bitstring: str) -> bytes:
    out = bytearray()
    acc = 0
    acc_bits = 0

    for position, ch in enumerate(bitstring):
        if ch == "1":
            acc = (acc << 1) | 1
        elif ch == "0":
            acc = acc << 1
        else:
            raise ValueError(f"invalid bit {ch!r} at position {position}")
        acc_bits += 1
        if acc_bits == 8:
            out.append(acc & 0xFF)
            acc = 0
            acc_bits = 0

    if acc_bits != 0:
        acc = acc << (8 - acc_bits)
        out.append(acc & 0xFF)

    return bytes(out)


def unpack_bits(data: bytes) -> str:
    return "".join(format(byte, "08b") for byte in data)
