"""Secure channel with the reader

Establishes a session through GET CHALLENGE and MUTUAL AUTHENTICATE, then
wraps every APDU with the session keys and the session counter. Any
failure terminates the session and wipes all key material.
"""

import hmac
import logging
from . import commands
from . import crypto
from . import handshake
from . import siv
from . import status
from .counter import SessionCounter
from .errors import (ISOException, TransportError, ChannelNotEstablished,
                     MacMismatchError, SecureChannelError)
from .handshake import Phase, KEY_N_BYTES, MAC_N_BYTES, NONCE_N_BYTES
from .kdf import derive_session_keys
from .reader import Disposition
from .secret import SecretBytes, wipe
from .util import to_hex, from_hex, split_response

logger = logging.getLogger(__name__)

# Key slot used when none is given
DEFAULT_KEY_SLOT = 0x00
# Longest APDU whose wrapped form still fits the one-byte Lc
APDU_MAX = commands.LC_MAX - MAC_N_BYTES


class SecureChannel:
    """Secure session with a reader.

    The reader is borrowed: any object offering connect(exclusive),
    disconnect(disposition), transmit(hex) -> hex and is_connected.
    Calls must be serialized by the caller, one command in flight at a time.
    """

    def __init__(self, reader):
        self._reader = reader
        self._phase = Phase.NOT_ESTABLISHED
        self._key_slot = DEFAULT_KEY_SLOT
        self._key_enc = None
        self._key_mac = None
        self._host_key = None
        self._host_nonce = None
        self._reader_nonce = None
        self._counter = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False

    @property
    def phase(self) -> int:
        return self._phase

    @property
    def state(self) -> str:
        return Phase.name(self._phase)

    @property
    def is_session_active(self) -> bool:
        return self._phase == Phase.ESTABLISHED

    @property
    def key_slot(self) -> int:
        return self._key_slot

    def establish(self, key, key_slot: int = DEFAULT_KEY_SLOT,
                  host_nonce: bytes = None, host_key: bytes = None):
        """Open secure session using 32-byte channel key.

        :param key: encryption key followed by MAC key, bytes or hex string
        :param key_slot: reader key slot holding the same key
        :param host_nonce: host nonce override, random by default
        :param host_key: host key override, random by default
        """
        if self._reader is None:
            raise RuntimeError("Channel is closed")
        keys = handshake.parse_channel_key(key)
        handshake.check_key_slot(key_slot)
        host_nonce = crypto.random(NONCE_N_BYTES) if host_nonce is None \
            else bytes(host_nonce)
        host_key = crypto.random(KEY_N_BYTES) if host_key is None \
            else bytes(host_key)
        if len(host_nonce) != NONCE_N_BYTES:
            raise ValueError("Host nonce must be %d bytes" % NONCE_N_BYTES)
        if len(host_key) != KEY_N_BYTES:
            raise ValueError("Host key must be %d bytes" % KEY_N_BYTES)

        self.terminate()
        self._key_slot = key_slot
        self._key_enc = SecretBytes(keys.key_enc)
        self._key_mac = SecretBytes(keys.key_mac)
        self._host_nonce = SecretBytes(host_nonce)
        self._host_key = SecretBytes(host_key)
        try:
            self._connect()
            self._get_challenge()
            data = self._host_authentication()
            self._reader_authentication(data)
        except Exception as exc:
            self._fail(exc)
            raise
        logger.debug("Secure session established using key slot %d",
                     key_slot)

    def _connect(self):
        if self._reader.is_connected:
            self._reader.disconnect()
        self._reader.connect(exclusive=True)
        if not self._reader.is_connected:
            raise TransportError("Unable to connect to reader: %s" %
                                 getattr(self._reader, 'name', '?'))

    def _transmit(self, apdu: bytes) -> tuple:
        """Transmit APDU returning data and status bytes"""
        response = self._reader.transmit(to_hex(apdu))
        try:
            return split_response(response)
        except ValueError as exc:
            raise TransportError("Invalid response: %r" % response) from exc

    def _enter(self, phase: int):
        logger.debug("Secure session: %s -> %s", Phase.name(self._phase),
                     Phase.name(phase))
        self._phase = phase

    def _expect(self, phase: int):
        if self._phase != phase:
            raise SecureChannelError("Unexpected phase %s, expected %s" % (
                Phase.name(self._phase), Phase.name(phase)))

    def _get_challenge(self):
        self._enter(Phase.GET_CHALLENGE)
        data, sw = self._transmit(commands.get_challenge(self._key_slot))
        if not status.is_success(sw):
            raise ISOException(sw, "GET CHALLENGE failed")
        self._reader_nonce = SecretBytes(
            handshake.reader_nonce_from_challenge(data))

    def _host_authentication(self) -> bytes:
        self._expect(Phase.GET_CHALLENGE)
        apdu = handshake.host_authentication(
            handshake.ChannelKeys(bytes(self._key_enc), bytes(self._key_mac)),
            self._key_slot, bytes(self._reader_nonce),
            bytes(self._host_nonce), bytes(self._host_key))
        data, sw = self._transmit(apdu)
        if not status.is_success(sw):
            raise ISOException(sw, "MUTUAL AUTHENTICATE failed")
        self._enter(Phase.MUTUAL_AUTHENTICATION)
        return data

    def _reader_authentication(self, data: bytes):
        self._expect(Phase.MUTUAL_AUTHENTICATION)
        auth = handshake.reader_authentication(
            handshake.ChannelKeys(bytes(self._key_enc), bytes(self._key_mac)),
            self._key_slot, data, bytes(self._reader_nonce),
            bytes(self._host_nonce))
        # Host and reader keys are only needed for the derivation
        with self._host_key, SecretBytes(auth.reader_key) as reader_key:
            session_keys = derive_session_keys(bytes(self._key_mac),
                                               bytes(self._host_key),
                                               bytes(reader_key))
        wipe(self._key_enc, self._key_mac)
        self._key_enc = SecretBytes(session_keys.key_enc)
        self._key_mac = SecretBytes(session_keys.key_mac)

        with self._host_nonce, self._reader_nonce:
            self._counter = SessionCounter(bytes(self._host_nonce),
                                           bytes(self._reader_nonce))
        self._enter(Phase.ESTABLISHED)

    def send_command(self, apdu):
        """Encrypt and send APDU returning decrypted response.

        Hex string in, hex string out; bytes in, bytes out.
        """
        if self._phase != Phase.ESTABLISHED:
            self.terminate()
            raise ChannelNotEstablished(
                "Attempt to send command via secure session, "
                "while session is not established")
        as_hex = isinstance(apdu, str)
        apdu = from_hex(apdu) if as_hex else bytes(apdu)
        if len(apdu) > APDU_MAX:
            raise ValueError("APDU too long for wrapping")

        try:
            plain = self._exchange(apdu)
        except Exception as exc:
            self._fail(exc)
            raise
        return to_hex(plain) if as_hex else plain

    def _exchange(self, apdu: bytes) -> bytes:
        key_enc, key_mac = bytes(self._key_enc), bytes(self._key_mac)

        header = self._counter.increment()
        mac = siv.mac(key_mac, header, apdu)
        enc = siv.encrypt(key_enc, mac, apdu)
        data, sw = self._transmit(
            commands.with_data(commands.SECURE_MESSAGE, enc + mac))
        # The reader increments its counter once more before answering
        header = self._counter.increment()

        if not status.is_success(sw):
            raise ISOException(sw, "Secure message failed")
        if len(data) < MAC_N_BYTES:
            raise TransportError("Invalid secure message response")
        enc, mac = data[:-MAC_N_BYTES], data[-MAC_N_BYTES:]
        plain = siv.decrypt(key_enc, mac, enc)
        if not hmac.compare_digest(mac, siv.mac(key_mac, header, plain)):
            raise MacMismatchError("MAC mismatch in response")
        return plain

    def _fail(self, exc):
        logger.warning("Secure session terminated in %s: %s",
                       Phase.name(self._phase), exc)
        self._phase = Phase.NOT_ESTABLISHED
        self.terminate()

    def terminate(self):
        """Terminate secure session, wiping all session data.

        Safe to call in any state and any number of times.
        """
        self._terminate(Disposition.LEAVE)

    def _terminate(self, disposition):
        try:
            if self._phase == Phase.ESTABLISHED:
                self._send_terminate()
            self._disconnect(disposition)
        finally:
            self._phase = Phase.NOT_ESTABLISHED
            self._wipe()

    def _send_terminate(self):
        try:
            data, sw = self._transmit(commands.TERMINATE)
        except Exception as exc:
            logger.warning("TERMINATE SECURE CHANNEL failed: %s", exc)
            return
        if not status.is_success(sw):
            logger.warning("TERMINATE SECURE CHANNEL failed: %s",
                           ISOException(sw))

    def _disconnect(self, disposition):
        # Any transport is accepted, none of its errors may escape terminate
        try:
            if self._reader is not None and self._reader.is_connected:
                self._reader.disconnect(disposition)
        except Exception as exc:
            logger.warning("Reader disconnect failed: %s", exc)

    def _wipe(self):
        wipe(self._key_enc, self._key_mac, self._host_key, self._host_nonce,
             self._reader_nonce, self._counter)
        self._key_enc = None
        self._key_mac = None
        self._host_key = None
        self._host_nonce = None
        self._reader_nonce = None
        self._counter = None

    def close(self):
        """Terminate session, reset the card and release the reader."""
        if self._reader is None:
            return
        self._terminate(Disposition.RESET)
        self._reader = None
