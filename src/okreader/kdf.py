"""Session key derivation"""

from collections import namedtuple
from struct import pack
from . import crypto

# Session keys of the established channel
SessionKeys = namedtuple('SessionKeys', ['key_enc', 'key_mac'])

# Length of each derived key in bytes
KEY_N_BYTES = 16
# Total length of derived key material in bits, appended after the counter
OUTPUT_N_BITS = 2 * KEY_N_BYTES * 8


def derive(master_mac_key: bytes, context: bytes) -> bytes:
    """Derive 32 bytes: CMAC(key, context || i || 0x0100) for i = 1, 2."""
    kdf = crypto.KBKDF(crypto.CMAC(master_mac_key), ctrlen_bytes=1,
                       ctr_loc=crypto.KBKDF.LOC_MIDDLE_FIXED,
                       mode=crypto.KBKDF.MODE_COUNTER)
    return bytes(kdf.derive(OUTPUT_N_BITS >> 3, context,
                            pack(">H", OUTPUT_N_BITS)))


def derive_session_keys(master_mac_key: bytes, host_key: bytes,
                        reader_key: bytes) -> SessionKeys:
    """Derive session encryption and MAC keys from both parties' keys."""
    if len(host_key) != KEY_N_BYTES or len(reader_key) != KEY_N_BYTES:
        raise ValueError("Host and reader keys must be %d bytes" %
                         KEY_N_BYTES)
    material = derive(master_mac_key, bytes(host_key) + bytes(reader_key))
    return SessionKeys(key_enc=material[:KEY_N_BYTES],
                       key_mac=material[KEY_N_BYTES:])
