"""Configuration management."""


class Config:
    """Configuration management."""

    # Reader settings
    VALIDATE_LENGTHS = True  # Check stored lengths/positions against the file before reading

    # Writer settings
    FSYNC_ON_FINALIZE = True  # fsync after writing the hash tables and header (files only)

    # CLI settings
    DEFAULT_COUNT = 10  # Records shown by top/tail when COUNT is omitted
    DISPLAY_ENCODING = 'utf-8'  # Bytes are shown decoded with this codec, undecodable bytes replaced
