import pytest
from constdb import Writer
from constdb.utils.config import Config


ITEMS = [
    (b"key", b"this is a value that is sligthly longer that the others"),
    (b"another key", b"value field"),
    (b"hi", b"asdf"),
]


@pytest.fixture(autouse=True)
def restore_config():
    """Tests may tweak Config; put the defaults back afterwards."""
    original_validate = Config.VALIDATE_LENGTHS
    original_fsync = Config.FSYNC_ON_FINALIZE
    original_count = Config.DEFAULT_COUNT
    yield
    Config.VALIDATE_LENGTHS = original_validate
    Config.FSYNC_ON_FINALIZE = original_fsync
    Config.DEFAULT_COUNT = original_count


@pytest.fixture
def cdb_path(tmp_path):
    """Path for a CDB file that does not exist yet."""
    return tmp_path / "test.cdb"


@pytest.fixture
def sample_db(cdb_path):
    """
    CDB with 261 records: three distinct keys, 128 single-byte keys holding
    two values each, and the key "25" holding "a" then "b".
    """
    with Writer.open(cdb_path) as writer:
        for key, value in ITEMS:
            writer.put(key, value)
        for i in range(128):
            writer.put(bytes([i]), bytes([i]))
        for i in range(128):
            writer.put(bytes([i]), bytes([128 - i]))
        writer.put(b"25", b"a")
        writer.put(b"25", b"b")
    return cdb_path


@pytest.fixture
def passwords_db(tmp_path):
    """CDB of 250 passwords whose values are their rank, "1" to "250"."""
    path = tmp_path / "top250pws.cdb"
    with Writer.open(path) as writer:
        for rank in range(1, 251):
            password = b"letmein" if rank == 10 else f"password{rank}".encode()
            writer.put(password, str(rank).encode())
    return path
