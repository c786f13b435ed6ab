"""
In-memory handling of decrypted secret values.

LEGAL NOTICE:
This module holds decrypted passwords. Values are kept only in memory, never
logged or written to disk, and are overwritten when no longer needed.
"""

from typing import Optional, Union

from cryptography.hazmat.primitives import constant_time


def first_line(content: str) -> str:
    """Return the first line of a secret file's content, without its line ending."""
    line = content.split("\n", 1)[0]
    if line.endswith("\r"):
        line = line[:-1]
    return line


class SecretValue:
    """
    One decrypted secret.

    The value is stored in a mutable buffer so that wipe() can overwrite it.
    repr() and str() never reveal it.
    """

    __hash__ = None

    def __init__(self, value: str):
        self._buffer = bytearray(value.encode('utf-8'))
        self._wiped = False

    @classmethod
    def from_content(cls, content: str) -> 'SecretValue':
        """Extract the secret from decrypted file content (its first line)."""
        return cls(first_line(content))

    @property
    def wiped(self) -> bool:
        return self._wiped

    def reveal(self) -> str:
        """Return the plaintext value."""
        if self._wiped:
            raise ValueError("SecretValue has been wiped")
        return self._buffer.decode('utf-8')

    def matches(self, other: Optional[Union[str, 'SecretValue']]) -> bool:
        """Constant-time equality against a plain string or another SecretValue."""
        if self._wiped or other is None:
            return False
        if isinstance(other, SecretValue):
            if other.wiped:
                return False
            candidate = bytes(other._buffer)
        else:
            candidate = other.encode('utf-8')
        return constant_time.bytes_eq(bytes(self._buffer), candidate)

    def wipe(self) -> None:
        """Overwrite the buffer with zeros and mark the value as destroyed."""
        for i in range(len(self._buffer)):
            self._buffer[i] = 0
        self._buffer = bytearray()
        self._wiped = True

    def __eq__(self, other):
        if isinstance(other, (str, SecretValue)):
            return self.matches(other)
        return NotImplemented

    def __len__(self) -> int:
        return len(self._buffer)

    def __bool__(self) -> bool:
        return not self._wiped and len(self._buffer) > 0

    def __repr__(self):
        state = "wiped" if self._wiped else "***"
        return f"SecretValue({state})"

    __str__ = __repr__
