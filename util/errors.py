# util/errors.py
from util.enums import ErrorMessage, ExitCode, MetadataFailure


class ReaperError(Exception):
    # Flow: raise a ReaperError subclass to abort the run with its exit code.
    def __init__(self, message: str, exit_code: int = ExitCode.FAILURE) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class StoreConnectionError(ReaperError):
    def __init__(self, detail: str) -> None:
        info = ErrorMessage.STORE_UNREACHABLE.value
        super().__init__(f"{info.message}: {detail}", info.exit_code)


class ProtocolShapeError(ReaperError):
    """
    A reply did not have the type the issuing command requires.
    Never retried: it points at protocol drift or a misconfigured key.
    """

    def __init__(self, command: str, detail: str) -> None:
        info = ErrorMessage.UNEXPECTED_REPLY.value
        super().__init__(f"{info.message} ({command}): {detail}", info.exit_code)
        self.command = command


class MetadataFormatError(ValueError):
    """A stored record field could not be decoded; only that candidate is skipped."""

    def __init__(self, reason: MetadataFailure, field: str, detail: str = "") -> None:
        super().__init__(f"{field}: {reason.value}{' ' + detail if detail else ''}")
        self.reason = reason
        self.field = field
