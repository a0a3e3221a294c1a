"""
Device session for a single M02 printer.

The session owns the BLE link. It walks through discovery and connection,
negotiates the write size, and pushes command streams chunk by chunk,
waiting for each acknowledgment before the next write. Nothing here is
retried automatically: a repeated write can mean repeated paper.

States:
    IDLE -> DISCOVERING -> CONNECTING -> CONNECTED <-> SENDING
    CONNECTED -> DISCONNECTING -> IDLE
    any state -> IDLE on disconnect() or when the printer drops the link
"""

from enum import Enum
from typing import Callable, Optional, Sequence

from .chunker import chunk
from .connection import BLEConnection, PrinterInfo
from .errors import (
    AlreadyInProgressError,
    BusyError,
    ConnectionFailedError,
    LinkLostError,
    NoDeviceFoundError,
    NotConnectedError,
    Phase,
    PrinterError,
    TransmitFailedError,
    UserCancelledError,
)
from .profiles import DEFAULT_PROFILES, PrinterProfile


class SessionState(Enum):
    """Lifecycle states of a DeviceSession."""
    IDLE = "idle"
    DISCOVERING = "discovering"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    SENDING = "sending"
    DISCONNECTING = "disconnecting"


# Picks one printer out of several candidates, or None to cancel
Chooser = Callable[[list[PrinterInfo]], Optional[PrinterInfo]]


def first_candidate(candidates: list[PrinterInfo]) -> Optional[PrinterInfo]:
    """Default chooser: best profile match, strongest signal."""
    return candidates[0]


class DeviceSession:
    """
    Stateful handle to one printer.

    Only one session per process is expected; the session serializes all
    traffic on its link.
    """

    SCAN_TIMEOUT = 10.0

    def __init__(self, connection: Optional[BLEConnection] = None):
        self.connection = connection if connection is not None else BLEConnection()
        self.state = SessionState.IDLE
        self.device: Optional[PrinterInfo] = None
        self.profile: Optional[PrinterProfile] = None
        self.chunk_size: Optional[int] = None
        self._link_lost = False
        # Bumped whenever the link is released; a send only writes while it matches
        self._generation = 0
        self._lost_generation: Optional[int] = None
        self._sending = False
        self._debug = False

    def set_debug(self, enabled: bool):
        """Enable/disable debug output."""
        self._debug = enabled

    def _log(self, message: str):
        """Print debug message if enabled."""
        if self._debug:
            print(f"[M02] {message}")

    def _reset(self):
        """Forget the bound device and return to IDLE."""
        self.state = SessionState.IDLE
        self.device = None
        self.profile = None
        self.chunk_size = None
        self._generation += 1

    @property
    def is_connected(self) -> bool:
        """True while a link is open (idle or sending)."""
        return self.state in (SessionState.CONNECTED, SessionState.SENDING)

    async def discover_and_connect(
        self,
        profiles: Sequence[PrinterProfile] = DEFAULT_PROFILES,
        timeout: float = SCAN_TIMEOUT,
        address: Optional[str] = None,
        chooser: Optional[Chooser] = None,
    ) -> "DeviceSession":
        """
        Find a supported printer and open a link to it.

        Args:
            profiles: Printer families to look for, in order of preference
            timeout: Scan duration in seconds
            address: Only accept the printer with this address
            chooser: Picks among several matches; returning None cancels

        Returns:
            This session, now CONNECTED

        Raises:
            AlreadyInProgressError: If a connection attempt is running or
                a printer is already connected
            NotSupportedError: If the host has no usable Bluetooth adapter
            UserCancelledError: If the chooser declined every printer
            NoDeviceFoundError: If no printer matched any profile
            ConnectionFailedError: If the link could not be opened
        """
        if self.state in (SessionState.DISCOVERING, SessionState.CONNECTING):
            raise AlreadyInProgressError(
                "A connection attempt is already in progress", phase=Phase.DISCOVERY
            )
        if self.state != SessionState.IDLE:
            raise AlreadyInProgressError(
                f"Session is already {self.state.value}; disconnect first",
                phase=Phase.CONNECT,
            )

        self.state = SessionState.DISCOVERING
        self._link_lost = False
        try:
            self._log(f"Scanning for {', '.join(str(p) for p in profiles)} ({timeout}s)...")
            candidates = await self.connection.scan(profiles, timeout=timeout, address=address)
            if not candidates:
                raise NoDeviceFoundError(
                    "No supported printer found. Is it turned on?", phase=Phase.DISCOVERY
                )

            if len(candidates) == 1:
                selected = candidates[0]
            else:
                selected = (chooser or first_candidate)(candidates)
            if selected is None:
                raise UserCancelledError("Printer selection cancelled", phase=Phase.DISCOVERY)

            self.state = SessionState.CONNECTING
            self._log(f"Connecting to {selected}...")
            await self.connection.connect(selected, on_link_lost=self._handle_link_lost)
            if self._link_lost:
                raise ConnectionFailedError(
                    f"{selected.name} dropped the link while connecting", phase=Phase.CONNECT
                )

            self.device = selected
            self.profile = selected.profile
            self.chunk_size = self._negotiate_chunk_size(selected.profile)
            self.state = SessionState.CONNECTED
            self._log(f"Connected, {self.chunk_size} bytes per write")
            return self
        except BaseException:
            # Cancellation included: never leave a half-open link behind
            await self.connection.disconnect()
            self._reset()
            raise

    def _negotiate_chunk_size(self, profile: PrinterProfile) -> int:
        """Pick the write size both the profile and the link allow."""
        link_limit = self.connection.max_write_size
        if link_limit is None or link_limit < 1:
            return profile.max_chunk_bytes
        return min(profile.max_chunk_bytes, link_limit)

    def _handle_link_lost(self):
        """Called by the connection when the printer drops the link."""
        if self.state in (SessionState.IDLE, SessionState.DISCONNECTING):
            return
        self._log("Link lost")
        self._link_lost = True
        if self.state in (SessionState.DISCOVERING, SessionState.CONNECTING):
            # discover_and_connect sees the flag and cleans up itself
            return
        self._lost_generation = self._generation
        self._reset()

    def _abort_error(self, token: int, sent: int, total: int, offset: int) -> PrinterError:
        """Error for a send whose link went away underneath it."""
        if token == self._lost_generation:
            return LinkLostError(
                f"Printer disconnected after {sent}/{total} chunks",
                phase=Phase.SEND,
                offset=offset,
            )
        return NotConnectedError(
            f"Session closed after {sent}/{total} chunks",
            phase=Phase.SEND,
            offset=offset,
        )

    async def send(self, stream: bytes) -> int:
        """
        Transmit a command stream in order, one acknowledged chunk at a time.

        A send is bound to the link it started on. If that link is closed
        or lost, the remaining chunks are dropped even if a new link has
        been opened since.

        Args:
            stream: Encoded command stream

        Returns:
            Number of chunks written

        Raises:
            BusyError: If another stream is being sent, including one still
                unwinding from a previous link
            NotConnectedError: If the session is not connected or was
                disconnected mid-stream
            TransmitFailedError: If a write failed; later chunks are not sent
            LinkLostError: If the printer disconnected mid-stream
        """
        if self.state == SessionState.SENDING or self._sending:
            raise BusyError("Printer is busy with another job", phase=Phase.SEND)
        if self.state != SessionState.CONNECTED:
            raise NotConnectedError("Not connected to printer", phase=Phase.SEND)

        chunks = chunk(stream, self.chunk_size)
        total = len(chunks)
        token = self._generation
        self.state = SessionState.SENDING
        self._sending = True
        self._log(f"Sending {len(stream)} bytes in {total} chunk(s)")
        sent = 0
        try:
            for piece in chunks:
                if self._generation != token or self.state != SessionState.SENDING:
                    raise self._abort_error(token, sent, total, piece.offset)
                try:
                    await self.connection.write(piece.data)
                except PrinterError as e:
                    if self._generation != token:
                        raise self._abort_error(token, sent, total, piece.offset) from e
                    if not isinstance(e, TransmitFailedError):
                        raise
                    raise TransmitFailedError(
                        f"Write failed at chunk {sent + 1}/{total}: {e}",
                        phase=Phase.SEND,
                        offset=piece.offset,
                    ) from e
                sent += 1
        finally:
            self._sending = False
            if self._generation == token and self.state == SessionState.SENDING:
                self.state = SessionState.CONNECTED

        self._log("Stream sent")
        return sent

    async def disconnect(self):
        """Close the link and return to IDLE. Safe to call in any state."""
        if self.state != SessionState.IDLE:
            self.state = SessionState.DISCONNECTING
        try:
            for error in await self.connection.disconnect():
                self._log(f"Error while disconnecting: {error}")
        finally:
            self._reset()
        self._log("Disconnected")
