# util/enums.py
from enum import Enum, IntEnum
from typing import NamedTuple


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1


class ErrorInfo(NamedTuple):
    message: str
    exit_code: int


class ErrorMessage(Enum):
    STORE_UNREACHABLE = ErrorInfo("Redis is unreachable", ExitCode.FAILURE)
    UNEXPECTED_REPLY = ErrorInfo("Unexpected reply shape from Redis", ExitCode.FAILURE)
    WORKER_FAILED = ErrorInfo("A worker process exited abnormally", ExitCode.FAILURE)


class MetadataFailure(str, Enum):
    INVALID_FORMAT = "invalid_format"
    OUT_OF_RANGE = "out_of_range"
    NULL_INPUT = "null_input"
