"""SIV-style authentication and encryption used by the reader secure channel

The MAC over a header and a payload also serves as the initial counter
block for AES-CTR encryption of the payload, so a single 16-byte tag
authenticates both inputs and keys the stream cipher.
"""

from . import crypto
from .util import xor_bytes, lshift1_bytes

# Block size in bytes
BLOCK_N_BYTES = crypto.AES.BLOCK_N_BYTES
# Block of AES cipher containing all zeroes
ZERO_BLOCK = BLOCK_N_BYTES * b'\0'
# Reduction constant of GF(2^128)
R_CONST = 0x87
# Offsets of counter block bytes whose top bit is cleared
CTR_IV_MASKED_OFFSETS = (8, 12)


def _check_block(block):
    if len(block) != BLOCK_N_BYTES:
        raise ValueError("Block must be %d bytes" % BLOCK_N_BYTES)


def double(block: bytes) -> bytes:
    """Multiplies a 16-byte block by x in GF(2^128)"""
    _check_block(block)
    res = lshift1_bytes(block)
    if block[0] & 0b10000000:  # Test MSB
        res[-1] ^= R_CONST
    return bytes(res)


def pad80(data: bytes) -> bytes:
    """Pads data shorter than a block with 0x80 00.. up to a full block"""
    if len(data) >= BLOCK_N_BYTES:
        raise ValueError("Data does not need padding")
    return bytes(data) + b'\x80' + (BLOCK_N_BYTES - len(data) - 1) * b'\0'


def xor_end(data: bytes, t: bytes) -> bytes:
    """XORs t into the last block of data.

    Data shorter than a block is padded and XORed into double(t) instead.
    """
    _check_block(t)
    if len(data) >= BLOCK_N_BYTES:
        split = len(data) - BLOCK_N_BYTES
        return bytes(data[:split]) + bytes(xor_bytes(data[split:], t))
    return bytes(xor_bytes(double(t), pad80(data)))


def mac(mac_key: bytes, header: bytes, data: bytes) -> bytes:
    """Computes 16-byte tag over header and data"""
    cmac_inst = crypto.CMAC(mac_key)
    d = double(cmac_inst.mac(ZERO_BLOCK))
    m = xor_bytes(cmac_inst.mac(header), d)
    return cmac_inst.mac(xor_end(data, m))


def ctr_iv(tag: bytes) -> bytes:
    """Derives initial counter block from tag"""
    _check_block(tag)
    iv = bytearray(tag)
    for offset in CTR_IV_MASKED_OFFSETS:
        iv[offset] &= 0x7F
    return bytes(iv)


def encrypt(key: bytes, tag: bytes, data: bytes) -> bytes:
    """Encrypts data with AES-CTR keyed by tag"""
    return crypto.aes_ctr(key, ctr_iv(tag), data)


def decrypt(key: bytes, tag: bytes, data: bytes) -> bytes:
    """Decrypts data with AES-CTR keyed by tag"""
    return crypto.aes_ctr(key, ctr_iv(tag), data)
