"""Core CDB components."""
from .reader import Reader
from .writer import Writer
from .iterator import ItemIterator
from .hashing import cdb_hash

__all__ = ['Reader', 'Writer', 'ItemIterator', 'cdb_hash']
