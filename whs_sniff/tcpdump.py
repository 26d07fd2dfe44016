"""Human-readable dumps of Ethernet/IPv4/TCP frames."""

from __future__ import annotations

import io
import socket
import time
from typing import Optional, TextIO

from whs_sniff.sniff import PacketHeader

ETH_P_IP = 0x0800
IPPROTO_TCP = 6
ETHER_HEADER_LEN = 14
IP_HEADER_LEN = 20
TCP_HEADER_LEN = 20
DUMP_LIMIT = 64
_ROW = 16


def _printable(data: bytes) -> str:
    return "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in data)


def hexdump(data: bytes, sep: str) -> str:
    """Hex bytes joined by ``sep``, 16 to a row with an offset and text column."""
    data = bytes(data)
    parts = []
    for start in range(0, len(data), _ROW):
        row = data[start : start + _ROW]
        cells = sep.join(f"{b:02x}" for b in row)
        if len(row) == _ROW:
            parts.append(
                f"{cells} | 0x{start:x}-0x{start + _ROW - 1:x} | {_printable(row)}\n"
            )
        elif sep == " ":
            padding = "   " * (_ROW - len(row))
            parts.append(
                f"{cells}{padding} | 0x{start:x}-0x{start + len(row):x} | "
                f"{_printable(row)}\n"
            )
        else:
            parts.append(cells)
    return "".join(parts)


def dump_ether(packet: bytes, out: TextIO) -> Optional[bytes]:
    """Describe the Ethernet header; return the IPv4 packet, or None if not IPv4."""
    out.write("+++++ Ethernet Frame +++++\n")
    if len(packet) < ETHER_HEADER_LEN:
        raise ValueError("truncated Ethernet header")
    ether_type = int.from_bytes(packet[12:14], "big")
    out.write(f"- EtherType: {ether_type:04x}\n")
    if ether_type != ETH_P_IP:
        print("Warning: L3 Protocol is not IPv4. Ignoring this frame.")
        return None
    out.write(f"- source MAC address: {hexdump(packet[6:12], ':')}\n")
    out.write(f"- destination MAC address: {hexdump(packet[0:6], ':')}\n")
    return packet[ETHER_HEADER_LEN:]


def dump_ip(packet: bytes, out: TextIO) -> Optional[bytes]:
    """Describe the IPv4 header; return the TCP segment, or None if not TCP."""
    out.write("+++++ IP Packet +++++\n")
    if len(packet) < IP_HEADER_LEN:
        raise ValueError("truncated IP header")
    protocol = packet[9]
    out.write(f"- Protocol: {protocol:x}\n")
    if protocol != IPPROTO_TCP:
        print("Warning: L3 Protocol is not TCP. Ignoring this packet.")
        return None
    out.write(f"- From: {socket.inet_ntoa(packet[12:16])}\n")
    out.write(f"- To: {socket.inet_ntoa(packet[16:20])}\n")
    out.write(f"- TTL: {packet[8]}\n")
    return packet[(packet[0] & 0x0F) * 4 :]


def dump_tcp(segment: bytes, out: TextIO) -> bytes:
    """Describe the TCP header and dump up to 64 payload bytes; return the payload."""
    out.write("+++++ TCP Data +++++\n")
    if len(segment) < TCP_HEADER_LEN:
        raise ValueError("truncated TCP header")
    out.write(f"- From: port {int.from_bytes(segment[0:2], 'big')}\n")
    out.write(f"- To: port {int.from_bytes(segment[2:4], 'big')}\n")
    header_len = segment[12] // 4
    if len(segment) < header_len:
        raise ValueError("truncated TCP header")
    payload = segment[header_len:]
    out.write(f"- Data size: {len(payload)}\n")
    out.write("\n")
    out.write("data dump start :::::\n")
    out.write(hexdump(payload[:DUMP_LIMIT], " "))
    out.write("::::: dump end\n")
    return payload


def hook(packet: bytes, header: PacketHeader, count: int) -> bool:
    """Print a report for one captured frame. Returns True only on failure."""
    print(f"===== PACKET #{count:05d}=====")
    out = io.StringIO()
    stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(header.ts_sec))
    out.write(f"Received packet at: {stamp}.{header.ts_usec:06d}\n")
    try:
        ip_packet = dump_ether(packet, out)
        if ip_packet is None:
            return False
        segment = dump_ip(ip_packet, out)
        if segment is None:
            return False
        dump_tcp(segment, out)
    except ValueError as exc:
        print(f"Warning: {exc}. Ignoring this packet.")
        return False
    print(out.getvalue(), end="")
    print("----- END LOG -----")
    print()
    return False