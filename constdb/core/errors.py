"""Exceptions raised by the CDB reader and writer."""


class CDBError(Exception):
    """Base class for all CDB errors."""
    pass


class CDBTooSmall(CDBError):
    """Raised when a file is under 2048 bytes and cannot hold a CDB header."""

    def __init__(self, size: int):
        super().__init__(f"File too small to be a CDB ({size} bytes)")
        self.size = size


class KeyNotInCDB(CDBError, KeyError):
    """Raised when the key (or the requested occurrence of it) is not in the CDB."""

    def __init__(self, key: bytes, occurrence: int = 0):
        super().__init__(key)
        self.key = key
        self.occurrence = occurrence

    def __str__(self):
        if self.occurrence:
            return f"The key {self.key!r} has no occurrence {self.occurrence} in the CDB"
        return f"The key {self.key!r} is not in the CDB"


class CDBIOError(CDBError):
    """Raised when the underlying file fails. The original OSError is the cause."""
    pass


class CorruptDatabase(CDBError):
    """Raised when a stored length or position points outside the file."""
    pass


class CDBTooLarge(CDBError):
    """Raised when a write would move an offset past the 32-bit limit."""
    pass


class CDBClosed(CDBError):
    """Raised when a closed or handed-off Reader/Writer is used."""
    pass
