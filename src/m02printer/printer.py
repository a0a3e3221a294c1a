"""
High-Level M02 Printer Interface.

Turns print requests into encoded command streams and hands them to a
DeviceSession. Failures are passed through unchanged apart from being
tagged with the phase they came from.
"""

from typing import Optional, Sequence

from .connection import BLEConnection, PrinterInfo
from .errors import EmptyContentError, Phase, PrinterError
from .escpos import PrintJob, content_job, encode, self_test_job
from .profiles import DEFAULT_PROFILES, PrinterProfile
from .session import Chooser, DeviceSession, SessionState


def _tag(error: PrinterError, phase: Phase) -> PrinterError:
    """Set the failure phase unless a lower layer already did."""
    if error.phase is None:
        error.phase = phase
    return error


def check_content(job: PrintJob):
    """Reject a job with nothing in its body.

    Raises:
        EmptyContentError: If the body is empty
    """
    if not job.body:
        raise EmptyContentError("Nothing to print", phase=Phase.ENCODE)


async def print_now(session: DeviceSession, job: PrintJob) -> int:
    """
    Encode a job and send it to the session's printer.

    Returns:
        Number of chunks written

    Raises:
        EmptyContentError: If the job has no body; nothing is sent
        PrinterError: Any session failure, tagged with its phase
    """
    check_content(job)

    stream = encode(job)
    try:
        return await session.send(stream)
    except PrinterError as e:
        raise _tag(e, Phase.SEND)


async def print_test(session: DeviceSession) -> int:
    """Print the built-in test page."""
    return await print_now(session, self_test_job())


class M02Printer:
    """
    High-level interface to a Phomemo M02 thermal printer.

    Wraps a single DeviceSession for front ends.
    """

    def __init__(self, session: Optional[DeviceSession] = None):
        self.session = session if session is not None else DeviceSession()

    def set_debug(self, enabled: bool):
        """Enable/disable debug output."""
        self.session.set_debug(enabled)

    @classmethod
    async def scan(
        cls,
        timeout: float = 10.0,
        profiles: Sequence[PrinterProfile] = DEFAULT_PROFILES,
    ) -> list[PrinterInfo]:
        """Scan for supported printers without connecting."""
        return await BLEConnection.scan(profiles, timeout=timeout)

    async def connect(
        self,
        address: Optional[str] = None,
        timeout: float = DeviceSession.SCAN_TIMEOUT,
        chooser: Optional[Chooser] = None,
        profiles: Sequence[PrinterProfile] = DEFAULT_PROFILES,
    ):
        """
        Discover and connect to a printer.

        Raises:
            PrinterError: Discovery or connection failure, tagged with its phase
        """
        try:
            await self.session.discover_and_connect(
                profiles, timeout=timeout, address=address, chooser=chooser
            )
        except PrinterError as e:
            raise _tag(e, Phase.CONNECT)

    async def disconnect(self):
        """Disconnect from the printer."""
        await self.session.disconnect()

    async def print_now(self, job: PrintJob) -> int:
        """Print an arbitrary job."""
        return await print_now(self.session, job)

    async def print_content(self, content_type: str, text: str) -> int:
        """Print generated content titled with its type (poem, fortune, ...)."""
        return await print_now(self.session, content_job(content_type, text))

    async def print_test(self) -> int:
        """Print the built-in test page."""
        return await print_test(self.session)

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self.session.state

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to a printer."""
        return self.session.is_connected
