"""
Exception hierarchy for the M02 printer driver.

Every failure raised by the driver derives from PrinterError and carries
the phase it happened in, so a front end can tell the user whether to
re-pair the printer, check the paper, or fix the text it sent.
"""

from enum import Enum
from typing import Optional


class Phase(str, Enum):
    """Stage of a print request a failure originated in."""
    DISCOVERY = "discovery"
    CONNECT = "connect"
    ENCODE = "encode"
    SEND = "send"


class PrinterError(Exception):
    """Base exception for all printer errors."""

    def __init__(self, message: str = "", phase: Optional[Phase] = None,
                 offset: Optional[int] = None):
        super().__init__(message)
        self.phase = phase
        self.offset = offset


class NotSupportedError(PrinterError):
    """Bluetooth LE is not available on this host."""

    pass


class UserCancelledError(PrinterError):
    """The user dismissed the printer picker."""

    pass


class NoDeviceFoundError(PrinterError):
    """Discovery finished without a printer matching any profile."""

    pass


class ConnectionFailedError(PrinterError):
    """A printer was found but the link could not be opened."""

    pass


class AlreadyInProgressError(PrinterError):
    """A connection attempt is running or a session is already open."""

    pass


class BusyError(PrinterError):
    """Another job is being transmitted on this session."""

    pass


class NotConnectedError(PrinterError):
    """The session has no open link to a printer."""

    pass


class TransmitFailedError(PrinterError):
    """A chunk write was not acknowledged.

    Part of the job may already be on paper; ``offset`` is the first byte
    that was not confirmed.
    """

    pass


class LinkLostError(PrinterError):
    """The printer dropped the link in the middle of a job."""

    pass


class EmptyContentError(PrinterError):
    """A print job was submitted with no body text."""

    pass


class InvalidConfigurationError(PrinterError):
    """A profile or transfer setting is out of range."""

    pass
