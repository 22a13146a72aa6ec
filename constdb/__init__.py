"""constdb - Reader and writer for DJB's constant database (CDB) format."""
__version__ = '1.0.0'

from .core.codec import pack, unpack
from .core.errors import (CDBError, CDBTooSmall, KeyNotInCDB, CDBIOError,
                          CorruptDatabase, CDBTooLarge, CDBClosed)
from .core.hashing import cdb_hash
from .core.iterator import ItemIterator
from .core.reader import Reader
from .core.writer import Writer

__all__ = ['Reader', 'Writer', 'ItemIterator', 'cdb_hash', 'pack', 'unpack',
           'CDBError', 'CDBTooSmall', 'KeyNotInCDB', 'CDBIOError',
           'CorruptDatabase', 'CDBTooLarge', 'CDBClosed']
