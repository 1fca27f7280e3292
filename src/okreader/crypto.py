"""Cryptographic primitives used by the secure channel"""

import os
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.cmac import CMAC as _CMAC
from .util import int_to_bytes_big_endian

# Counter (CTR) mode of operation, the only one the reader uses
MODE_CTR = 2


def random(n_bytes: int) -> bytes:
    """Returns n_bytes from the OS cryptographically secure generator"""
    return os.urandom(n_bytes)


class AES:
    """AES-128 block cipher"""

    # Block size in bytes
    BLOCK_N_BYTES = 128//8
    # Only AES-128 keys are used by the reader
    ALLOWED_KEY_LEN = (16,)

    def __init__(self, key, mode: int, IV=None):
        """Creates AES block cipher"""
        if len(key) not in self.ALLOWED_KEY_LEN:
            raise ValueError("Invalid length of an AES key")
        if mode == MODE_CTR:
            if IV is None or len(IV) != self.BLOCK_N_BYTES:
                raise ValueError("CTR mode requires 16-byte initial counter")
            self._cipher = Cipher(algorithms.AES(bytes(key)),
                                  modes.CTR(bytes(IV)))
        else:
            raise ValueError("Unsupported mode of operation")

    def encrypt(self, in_buf):
        """Encrypts data"""
        encryptor = self._cipher.encryptor()
        return encryptor.update(bytes(in_buf)) + encryptor.finalize()


class PRF:
    """Base class for algorithms usable as a pseudo-random function for KBKDF
    """

    def prf(self, x):
        """Invokes a pseudo-random function with a key from PRF instance"""
        raise NotImplementedError()

    @property
    def prf_len_bytes(self):
        """Returns the length of the output of the PRF in bytes"""
        raise NotImplementedError()


class CMAC(PRF):
    """AES-CMAC message authentication code (NIST SP 800-38B)"""

    def __init__(self, key):
        """Creates an instance of CMAC algorithm bound to a key"""
        if len(key) not in AES.ALLOWED_KEY_LEN:
            raise ValueError("Invalid length of an AES key")
        self._key = bytes(key)

    def mac(self, msg) -> bytes:
        """Calculates MAC"""
        c = _CMAC(algorithms.AES(self._key))
        c.update(bytes(msg))
        return c.finalize()

    def prf(self, x):
        """Invokes a pseudo-random function with a key from PRF instance"""
        return self.mac(x)

    @property
    def prf_len_bytes(self):
        """Returns the length of the output of the PRF in bytes"""
        return AES.BLOCK_N_BYTES


def cmac(key, msg) -> bytes:
    """Computes 16-byte AES-CMAC of a message"""
    return CMAC(key).mac(msg)


def aes_ctr(key, iv, data) -> bytes:
    """Runs AES-128 in counter mode, encryption and decryption are the same"""
    return AES(key, MODE_CTR, iv).encrypt(data)


class KBKDF:
    """Key-based key derivation function (NIST SP 800-108)"""

    # Configures KDF in counter mode
    MODE_COUNTER = 1

    # Counter in middle of fixed input data before context
    LOC_MIDDLE_FIXED = 2

    def __init__(self, prf_inst: PRF, ctrlen_bytes, ctr_loc: int, mode: int):
        """Creates an instance of KDF"""
        if ctr_loc != KBKDF.LOC_MIDDLE_FIXED:
            raise NotImplementedError("Counter location not supported")
        if mode == KBKDF.MODE_COUNTER:
            assert prf_inst.prf_len_bytes >= 1
            self._prf_inst = prf_inst
            self._ctrlen_bytes = ctrlen_bytes
            self._derive_fn = self._derive_in_counter_mode
        else:
            raise NotImplementedError("Mode not supported")

    def _make_input_block(self, ctr, data1, data2):
        """Composes input block for PRF"""
        ctr_bytes = int_to_bytes_big_endian(ctr, self._ctrlen_bytes)
        return data1 + ctr_bytes + data2

    def _derive_in_counter_mode(self, len_bytes, data1, data2=b''):
        """Derives key material"""
        if len_bytes == 0:
            return b''
        n_blocks = -(len_bytes // -self._prf_inst.prf_len_bytes)
        if n_blocks > (256 ** self._ctrlen_bytes) - 1:
            raise ValueError("Counter overflow")

        result = bytearray()
        ctr = 1
        len_remainder = len_bytes % self._prf_inst.prf_len_bytes
        for _ in range(n_blocks):
            in_block = self._make_input_block(ctr, bytes(data1), bytes(data2))
            if ctr == n_blocks and len_remainder:
                result += self._prf_inst.prf(in_block)[:len_remainder]
            else:
                result += self._prf_inst.prf(in_block)
            ctr += 1

        return result

    def derive(self, len_bytes, data1, data2=b''):
        return self._derive_fn(len_bytes, data1, data2)
