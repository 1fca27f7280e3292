"""Exceptions raised by the secure channel"""

from binascii import hexlify
from . import status


class SecureChannelError(Exception):
    """Base class of all secure channel errors"""


class TransportError(SecureChannelError):
    """Reader connection failed or returned a malformed response"""


class ISOException(TransportError):
    """Reader returned a status word other than 9000"""

    def __init__(self, code, context=""):
        self.code = bytes(code)
        self.context = context
        super().__init__(str(self))

    def __str__(self):
        text = "0x%s '%s'" % (hexlify(self.code).decode().upper(),
                              status.response_text(self.code))
        return "%s: %s" % (self.context, text) if self.context else text

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, str(self))


class IntegrityError(SecureChannelError):
    """Authentication of reader data failed, the session is terminated"""


class MacMismatchError(IntegrityError):
    """Received MAC differs from the computed one"""


class NonceMismatchError(IntegrityError):
    """Nonce echoed by the reader differs from the expected one"""


class ChannelNotEstablished(SecureChannelError, RuntimeError):
    """Secure messaging requested without an established session"""
