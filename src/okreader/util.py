"""Utility functions"""

from binascii import hexlify, unhexlify, Error as BinasciiError


def to_hex(data: bytes) -> str:
    """Converts bytes to the upper case hex string used on the wire"""
    return hexlify(bytes(data)).decode().upper()


def from_hex(text: str) -> bytes:
    """Converts hex string, possibly containing spaces, to bytes"""
    text = text.replace(" ", "")
    if len(text) % 2:
        raise ValueError("Hex string has odd length")
    try:
        return unhexlify(text)
    except BinasciiError as exc:
        raise ValueError("Invalid hex string") from exc


def int_to_bytes_big_endian(x: int, n_bytes: int) -> bytearray:
    """Converts integer to bytes in big endian mode"""
    if x >= 256 ** n_bytes:
        raise ValueError("Conversion overflow")
    res = bytearray(n_bytes)
    shift = 0
    for i in range(n_bytes - 1, -1, -1):
        res[i] = (x >> shift) & 0xff
        shift += 8
    return res


def bytes_to_int_big_endian(data: bytes) -> int:
    """Converts bytes to integer in big endian mode"""
    res = 0
    for x in data:
        res = (res << 8) | x
    return res


def xor_bytes(a: bytes, b: bytes) -> bytearray:
    """Returns result of a XOR operation over two byte strings or arrays"""
    if len(a) != len(b):
        raise ValueError("Operands have different size")
    res = bytearray(a)
    for i, x in enumerate(b):
        res[i] ^= x
    return res


def lshift1_bytes(data: bytes) -> bytearray:
    """Shifts data in byte array or string by one bit left"""
    res = bytearray(data)
    if len(data):
        idx = 0
        for _ in range(len(data) - 1):
            res[idx] = (data[idx] << 1) & 0xff | (data[idx + 1] >> 7)
            idx += 1
        res[idx] = (data[idx] << 1) & 0xff
    return res


def split_response(response: str) -> tuple:
    """Splits hex response into data bytes and status bytes"""
    if len(response) < 4:
        raise ValueError("Response is too short")
    return from_hex(response[:-4]), from_hex(response[-4:])
