# util/functions.py
import os
import re
from typing import Optional, Union
from util.constants import MAX_UNSIGNED
from util.enums import MetadataFailure
from util.errors import MetadataFormatError

_DIGITS = re.compile(r"[0-9]+")


def as_text(value: Optional[Union[bytes, str]], field: str) -> str:
    """
    - Redis hands back raw bytes (decode_responses=False); turn them into str.
    - Missing fields raise NULL_INPUT, anything non-textual INVALID_FORMAT.
    """
    if value is None:
        raise MetadataFormatError(MetadataFailure.NULL_INPUT, field)
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            raise MetadataFormatError(
                MetadataFailure.INVALID_FORMAT, field, "not utf-8"
            ) from None
    if isinstance(value, str):
        return value
    raise MetadataFormatError(
        MetadataFailure.INVALID_FORMAT, field, f"type={type(value).__name__}"
    )


def as_path(value: Optional[Union[bytes, str]], field: str = "path") -> str:
    """
    Filenames are arbitrary bytes on POSIX. Decode with the filesystem codec
    (surrogateescape) so os.lstat/os.unlink get the original bytes back.
    """
    if value is None:
        raise MetadataFormatError(MetadataFailure.NULL_INPUT, field)
    if isinstance(value, (bytes, bytearray)):
        return os.fsdecode(bytes(value))
    if isinstance(value, str):
        return value
    raise MetadataFormatError(
        MetadataFailure.INVALID_FORMAT, field, f"type={type(value).__name__}"
    )


def printable(text: str) -> str:
    """Undecodable bytes carried as surrogates, shown as \\xNN escapes."""
    return text.encode("utf-8", errors="surrogateescape").decode(
        "utf-8", errors="backslashreplace"
    )


def unquote_field(value: str, field: str = "field") -> str:
    """
    Records are stored pre-quoted; drop exactly one char from each end.
    The delimiter itself is not checked.
    """
    if len(value) < 2:
        raise MetadataFormatError(MetadataFailure.INVALID_FORMAT, field, "too short")
    return value[1:-1]


def parse_unsigned(text: Optional[str], field: str = "mtime") -> int:
    if text is None:
        raise MetadataFormatError(MetadataFailure.NULL_INPUT, field)
    if not _DIGITS.fullmatch(text):
        raise MetadataFormatError(MetadataFailure.INVALID_FORMAT, field, repr(text))
    value = int(text)
    if value > MAX_UNSIGNED:
        raise MetadataFormatError(MetadataFailure.OUT_OF_RANGE, field, text)
    return value


def is_eligible(fresh_mtime: int, retention_seconds: int, now: int) -> bool:
    # Strictly older than the retention window, measured on the live file.
    return fresh_mtime + retention_seconds < now
