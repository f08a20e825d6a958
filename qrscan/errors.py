"""
QR Scan Errors - Failure kinds and their process exit codes
License: MIT
"""


class QrScanError(Exception):
    """Base error; carries the exit code the CLI should return."""

    exit_code = 1

    def __init__(self, message: str, exit_code: int = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class UsageError(QrScanError):
    exit_code = 2


class IoError(QrScanError):
    """File, stdin, or export destination could not be read or written."""


class DecodeError(QrScanError):
    """Bytes were not a recognized image format."""


class DeviceError(QrScanError):
    """Camera unavailable or no frame could be captured."""


class EncodeError(QrScanError):
    """Content does not fit into a QR symbol."""


# Exit codes
EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_IS_DIRECTORY = 2
EXIT_NO_SUCH_FILE = 3
EXIT_INTERRUPTED = 130
