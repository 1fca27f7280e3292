"""Mutual authentication of host and reader

Each step is a pure function over byte strings: it builds the next command
or verifies the reader's answer, raising on any verification failure. The
channel performs the transport I/O and the phase changes.
"""

import hmac
from collections import namedtuple
from . import commands
from . import siv
from .errors import TransportError, MacMismatchError, NonceMismatchError
from .util import from_hex

# Length of encryption key in bytes
KEY_N_BYTES = 16
# Length of MAC in bytes
MAC_N_BYTES = 16
# Length of nonce in bytes
NONCE_N_BYTES = 16
# Length of channel key (encryption key followed by MAC key) in bytes
CHANNEL_KEY_N_BYTES = 2 * KEY_N_BYTES
# Length of the encrypted part of the authentication cryptograms
AUTH_PLAIN_N_BYTES = 2 * NONCE_N_BYTES + KEY_N_BYTES

# Static keys of the secure channel
ChannelKeys = namedtuple('ChannelKeys', ['key_enc', 'key_mac'])

# Verified content of the reader authentication cryptogram
ReaderAuthentication = namedtuple('ReaderAuthentication',
                                  ['reader_nonce', 'host_nonce', 'reader_key'])


class Phase:
    """Secure session phases"""
    NOT_ESTABLISHED = 0
    GET_CHALLENGE = 1
    MUTUAL_AUTHENTICATION = 2
    ESTABLISHED = 3

    _names = {
        NOT_ESTABLISHED: "NotEstablished",
        GET_CHALLENGE: "GetChallengePhase",
        MUTUAL_AUTHENTICATION: "MutualAuthenticationPhase",
        ESTABLISHED: "Established"
    }

    @classmethod
    def name(cls, phase: int) -> str:
        return cls._names.get(phase, "<unknown>")


def parse_channel_key(key) -> ChannelKeys:
    """Split 32-byte channel key, given as bytes or hex, into two keys"""
    if isinstance(key, str):
        if len(key) != 2 * CHANNEL_KEY_N_BYTES:
            raise ValueError("key length invalid, expected %d bytes key" %
                             CHANNEL_KEY_N_BYTES)
        key = from_hex(key)
    if len(key) != CHANNEL_KEY_N_BYTES:
        raise ValueError("key length invalid, expected %d bytes key" %
                         CHANNEL_KEY_N_BYTES)
    key = bytes(key)
    return ChannelKeys(key_enc=key[:KEY_N_BYTES], key_mac=key[KEY_N_BYTES:])


def check_key_slot(key_slot: int) -> int:
    """Validate key slot number"""
    if not isinstance(key_slot, int) or not (0 <= key_slot <= 0xFF):
        raise ValueError("Invalid key slot: %r" % (key_slot,))
    return key_slot


def reader_nonce_from_challenge(data: bytes) -> bytes:
    """Extract reader nonce from GET CHALLENGE response data"""
    if len(data) < NONCE_N_BYTES:
        raise TransportError("Invalid GET CHALLENGE response")
    return bytes(data[:NONCE_N_BYTES])


def host_authentication(keys: ChannelKeys, key_slot: int, reader_nonce,
                        host_nonce, host_key) -> bytes:
    """Build MUTUAL AUTHENTICATE command carrying host cryptogram"""
    plain = bytes(host_nonce) + bytes(reader_nonce) + bytes(host_key)
    if len(plain) != AUTH_PLAIN_N_BYTES:
        raise ValueError("Invalid nonce or key length")
    mac = siv.mac(keys.key_mac, bytes([key_slot]), plain)
    enc = siv.encrypt(keys.key_enc, mac, plain)
    return commands.with_data(commands.MUTUAL_AUTHENTICATE, enc + mac)


def reader_authentication(keys: ChannelKeys, key_slot: int, data: bytes,
                          reader_nonce, host_nonce) -> ReaderAuthentication:
    """Verify reader cryptogram returned by MUTUAL AUTHENTICATE"""
    if len(data) != AUTH_PLAIN_N_BYTES + MAC_N_BYTES:
        raise TransportError("Invalid MUTUAL AUTHENTICATE response")
    enc, mac2 = data[:AUTH_PLAIN_N_BYTES], data[AUTH_PLAIN_N_BYTES:]
    plain2 = siv.decrypt(keys.key_enc, mac2, enc)
    mac3 = siv.mac(keys.key_mac, bytes([key_slot]), plain2)
    if not hmac.compare_digest(mac2, mac3):
        raise MacMismatchError("MAC mismatch")
    result = ReaderAuthentication(
        reader_nonce=plain2[:NONCE_N_BYTES],
        host_nonce=plain2[NONCE_N_BYTES:2 * NONCE_N_BYTES],
        reader_key=plain2[2 * NONCE_N_BYTES:])
    if result.reader_nonce != bytes(reader_nonce):
        raise NonceMismatchError("Reader nonce mismatch")
    if result.host_nonce != bytes(host_nonce):
        raise NonceMismatchError("Host nonce mismatch")
    return result
