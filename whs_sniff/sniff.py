"""Live packet capture with a per-packet callback."""

from __future__ import annotations

import signal
import socket
import struct
import threading
import time
from dataclasses import dataclass
from types import FrameType
from typing import Callable, Optional, Protocol

#: Bytes of each frame kept and handed to the handler.
SNAPLEN = 8192
#: Seconds a single read waits for a frame before giving up.
READ_TIMEOUT = 0.5

_READ_SIZE = 65536
_ETH_P_ALL = 0x0003
_ETH_P_IP = 0x0800
_IPPROTO_TCP = 6
_TH_PUSH = 0x08
_SOL_PACKET = 263
_PACKET_ADD_MEMBERSHIP = 1
_PACKET_MR_PROMISC = 1

#: Cleared by :func:`handle_signal` to ask a capture loop to stop.
running = threading.Event()


class SniffError(Exception):
    """Raised when the capture device or a packet handler fails."""


@dataclass(frozen=True)
class PacketHeader:
    """Capture metadata for one frame."""

    ts_sec: int
    ts_usec: int
    caplen: int
    length: int


PacketHandler = Callable[[bytes, PacketHeader, int], bool]
PacketFilter = Callable[[bytes], bool]


class CaptureSocket(Protocol):
    def recv(self, bufsize: int) -> bytes: ...

    def close(self) -> None: ...


def tcp_push_filter(packet: bytes) -> bool:
    """Accept Ethernet/IPv4 TCP frames whose PSH flag is set."""
    if len(packet) < 14 + 20:
        return False
    if int.from_bytes(packet[12:14], "big") != _ETH_P_IP:
        return False
    ip = packet[14:]
    if ip[9] != _IPPROTO_TCP:
        return False
    if int.from_bytes(ip[6:8], "big") & 0x1FFF:
        return False
    flags_at = (ip[0] & 0x0F) * 4 + 13
    if len(ip) <= flags_at:
        return False
    return bool(ip[flags_at] & _TH_PUSH)


def open_capture_socket(interface: str) -> socket.socket:
    """Open a promiscuous raw socket bound to ``interface``."""
    family = getattr(socket, "AF_PACKET", None)
    if family is None:
        raise SniffError("Fail: open device")
    try:
        sock = socket.socket(family, socket.SOCK_RAW, socket.htons(_ETH_P_ALL))
    except OSError as exc:
        raise SniffError("Fail: open device") from exc
    try:
        sock.bind((interface, 0))
        membership = struct.pack(
            "iHH8s", socket.if_nametoindex(interface), _PACKET_MR_PROMISC, 0, b""
        )
        sock.setsockopt(_SOL_PACKET, _PACKET_ADD_MEMBERSHIP, membership)
        sock.settimeout(READ_TIMEOUT)
    except OSError as exc:
        sock.close()
        raise SniffError("Fail: open device") from exc
    return sock


class Sniffer:
    """Reads frames from a capture socket and passes matching ones to a handler."""

    def __init__(
        self,
        interface: str,
        packet_filter: Optional[PacketFilter],
        handler: PacketHandler,
        capture_socket: Optional[CaptureSocket] = None,
    ) -> None:
        self.interface = interface
        self.error = ""
        self.packet_count = 0
        self._hook = handler
        if packet_filter is not None and not callable(packet_filter):
            self.error = "Fail: set filter"
            raise SniffError(self.error)
        self._filter = packet_filter
        if capture_socket is None:
            capture_socket = open_capture_socket(interface)
        self._socket: Optional[CaptureSocket] = capture_socket

    def _failure(self, message: str) -> SniffError:
        self.error = message
        return SniffError(message)

    def loop(self) -> bool:
        """Handle the next matching frame; return False if the read timed out."""
        if self._socket is None:
            raise self._failure("Error: pcap_next")
        while True:
            try:
                data = self._socket.recv(_READ_SIZE)
            except TimeoutError:
                return False
            except OSError as exc:
                raise self._failure("Error: pcap_next") from exc
            if self._filter is None or self._filter(data):
                break

        now_ns = time.time_ns()
        packet = bytes(data[:SNAPLEN])
        header = PacketHeader(
            ts_sec=now_ns // 1_000_000_000,
            ts_usec=(now_ns // 1000) % 1_000_000,
            caplen=len(packet),
            length=len(data),
        )
        self.packet_count += 1
        try:
            failed = self._hook(packet, header, self.packet_count)
        except Exception as exc:
            raise self._failure("Error: from event hook") from exc
        if failed:
            raise self._failure("Error: from event hook")
        return True

    def set_event_hook(self, handler: PacketHandler) -> None:
        self._hook = handler

    def has_error(self) -> bool:
        return bool(self.error)

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def __enter__(self) -> "Sniffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def handle_signal(signo: int, frame: Optional[FrameType]) -> None:
    """Signal handler that asks the capture loop to stop."""
    running.clear()


def set_signal_handler() -> None:
    """Install :func:`handle_signal` for SIGINT."""
    try:
        signal.signal(signal.SIGINT, handle_signal)
    except (ValueError, OSError) as exc:
        raise SniffError("Error setting handler") from exc