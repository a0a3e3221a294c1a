"""Phomemo M02 Thermal Printer Driver for Linux/macOS/Windows."""

__version__ = "0.1.0"

from .printer import M02Printer, print_now, print_test
from .session import DeviceSession, SessionState
from .connection import BLEConnection, PrinterInfo
from .escpos import PrintJob, Alignment, TextStyle, encode, content_job, self_test_job
from .chunker import Chunk, chunk
from .profiles import PrinterProfile, PHOMEMO_M02, DEFAULT_PROFILES
from .errors import (
    Phase,
    PrinterError,
    NotSupportedError,
    UserCancelledError,
    NoDeviceFoundError,
    ConnectionFailedError,
    AlreadyInProgressError,
    BusyError,
    NotConnectedError,
    TransmitFailedError,
    LinkLostError,
    EmptyContentError,
    InvalidConfigurationError,
)

__all__ = [
    "M02Printer",
    "print_now",
    "print_test",
    "DeviceSession",
    "SessionState",
    "BLEConnection",
    "PrinterInfo",
    "PrintJob",
    "Alignment",
    "TextStyle",
    "encode",
    "content_job",
    "self_test_job",
    "Chunk",
    "chunk",
    "PrinterProfile",
    "PHOMEMO_M02",
    "DEFAULT_PROFILES",
    "Phase",
    "PrinterError",
    "NotSupportedError",
    "UserCancelledError",
    "NoDeviceFoundError",
    "ConnectionFailedError",
    "AlreadyInProgressError",
    "BusyError",
    "NotConnectedError",
    "TransmitFailedError",
    "LinkLostError",
    "EmptyContentError",
    "InvalidConfigurationError",
]
