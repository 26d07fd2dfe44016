# whs_sniff

A small packet sniffer for Linux. It listens on one network interface and keeps
only Ethernet/IPv4 TCP segments that have the PSH flag set. For each one it
prints:

- the packet number and the time it arrived,
- the Ethernet frame: EtherType and source and destination MAC addresses,
- the IPv4 packet: protocol, source and destination address, and TTL,
- the TCP segment: source and destination port, payload size, and a hex dump of
  up to the first 64 bytes of the payload.

Frames that do not carry IPv4, and IPv4 packets that do not carry TCP, are
skipped with a warning. Truncated headers are skipped with a warning too.

## Installation

```
pip install .
```

The package depends only on the standard library. Capturing uses a raw
`AF_PACKET` socket in promiscuous mode, so it works on Linux only and needs root
or the `CAP_NET_RAW` capability.

## Usage

```
sudo whs_sniff eth0
```

The command takes exactly one argument, the name of the interface. Given any
other number of arguments it prints `Usage: whs_sniff {IFACE}` to standard
error and exits with status 1. If the interface cannot be opened it prints
`Error opening interface: ...` and exits with status 1.

Once started it prints `Starting whs_sniff` and runs until capture fails or it
is interrupted with Ctrl-C; in both cases it exits with status 0, and a capture
failure is reported on standard error.

Sample output for one segment:

```
===== PACKET #00001=====
Received packet at: 2024-01-01 12:00:00.000123
+++++ Ethernet Frame +++++
- EtherType: 0800
- source MAC address: 02:00:00:00:00:01
- destination MAC address: 02:00:00:00:00:02
+++++ IP Packet +++++
- Protocol: 6
- From: 192.0.2.1
- To: 192.0.2.2
- TTL: 64
+++++ TCP Data +++++
- From: port 80
- To: port 50000
- Data size: 5

data dump start :::::
68 65 6c 6c 6f                                  | 0x0-0x5 | hello
::::: dump end
----- END LOG -----
```

## Using it as a library

`whs_sniff.sniff.Sniffer(interface, packet_filter, handler, capture_socket=None)`
reads frames and calls a handler for every frame the filter accepts.

- `packet_filter` is a callable taking the raw frame bytes and returning a
  boolean, or `None` to accept everything. `tcp_push_filter` accepts
  unfragmented IPv4 TCP frames with PSH set.
- `handler` takes the frame bytes, a `PacketHeader` (`ts_sec`, `ts_usec`,
  `caplen`, `length`) and the running packet count, and returns `True` to
  report an error.
- `capture_socket` is any object with `recv(bufsize)` and `close()`; when it is
  omitted, `open_capture_socket(interface)` opens a raw socket on the interface.

`loop()` handles the next accepted frame and returns `True`, or returns `False`
when a read times out (after 0.5 seconds). It raises `SniffError` when reading
fails or the handler raises or returns `True`; `has_error()` then reports it.
`set_event_hook(handler)` replaces the handler. The sniffer is a context
manager and closes its socket on exit.

```python
from whs_sniff.sniff import Sniffer, SniffError, tcp_push_filter
from whs_sniff.tcpdump import hook

with Sniffer("eth0", tcp_push_filter, hook) as sniffer:
    try:
        while True:
            sniffer.loop()
    except SniffError as exc:
        print(exc)
```

`set_signal_handler()` installs `handle_signal` for SIGINT, which clears the
`running` event so a loop that checks `running.is_set()` can stop.

The decoding functions in `whs_sniff.tcpdump` (`hexdump`, `dump_ether`,
`dump_ip`, `dump_tcp` and `hook`) work on plain `bytes`, so they can be used on
packets that come from anywhere.

## What it does not do

There is no support for reading or writing capture files, and filters are
Python callables rather than filter-expression strings. Only Ethernet, IPv4 and
TCP are decoded.