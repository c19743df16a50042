from typing import Final

# Largest mtime a stored record may carry (unsigned 64-bit).
MAX_UNSIGNED: Final[int] = 2**64 - 1


class CliDefaults:
    PROG = "reaper"
    HOST = "localhost"
    PORT = 6379
