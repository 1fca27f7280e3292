"""Zeroable container for key material"""


class SecretBytes:
    """Mutable byte buffer which can be wiped in place.

    Used as a context manager the buffer is wiped on exit, both on normal
    completion and when an exception propagates.
    """

    def __init__(self, data=b''):
        self._buf = bytearray(data)

    def __len__(self):
        return len(self._buf)

    def __bytes__(self):
        return bytes(self._buf)

    def __repr__(self):
        # Content is not shown
        return "%s(<%d bytes>)" % (type(self).__name__, len(self._buf))

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.wipe()
        return False

    @property
    def wiped(self) -> bool:
        """True if the buffer is empty or contains only zeroes"""
        return not any(self._buf)

    def wipe(self):
        """Overwrites content with zeroes and releases it"""
        for i in range(len(self._buf)):
            self._buf[i] = 0
        self._buf = bytearray()


def wipe(*secrets):
    """Wipes every SecretBytes passed, None values are skipped"""
    for secret in secrets:
        if secret is not None:
            secret.wipe()
