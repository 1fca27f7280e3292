"""Session counter bound into every secure messaging MAC"""

from .util import int_to_bytes_big_endian, bytes_to_int_big_endian

# Number of bytes in the counter
CTR_N_BYTES = 16
# Number of bytes taken from each nonce to seed the counter
SEED_PART_N_BYTES = CTR_N_BYTES // 2
# Counter wraps around at this value
CTR_MODULUS = 256 ** CTR_N_BYTES


def seed(host_nonce: bytes, reader_nonce: bytes) -> bytes:
    """Initial counter value: host_nonce[0:8] || reader_nonce[0:8]"""
    if len(host_nonce) < SEED_PART_N_BYTES or \
            len(reader_nonce) < SEED_PART_N_BYTES:
        raise ValueError("Nonce is too short")
    return (bytes(host_nonce[:SEED_PART_N_BYTES]) +
            bytes(reader_nonce[:SEED_PART_N_BYTES]))


class SessionCounter:
    """16-byte big endian counter incremented modulo 2^128.

    Both parties increment before sending and after receiving a secured
    APDU, so every exchange advances the counter by two.
    """

    def __init__(self, host_nonce: bytes, reader_nonce: bytes):
        self._value = bytearray(seed(host_nonce, reader_nonce))

    @property
    def value(self) -> bytes:
        if not self._value:
            raise RuntimeError("Counter was wiped")
        return bytes(self._value)

    def increment(self) -> bytes:
        """Adds one to the counter returning the new value"""
        x = (bytes_to_int_big_endian(self.value) + 1) % CTR_MODULUS
        self._value[:] = int_to_bytes_big_endian(x, CTR_N_BYTES)
        return self.value

    def wipe(self):
        for i in range(len(self._value)):
            self._value[i] = 0
        self._value = bytearray()
