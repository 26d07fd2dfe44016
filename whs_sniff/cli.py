"""Command line entry point: sniff TCP PSH segments on one interface."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from whs_sniff.sniff import Sniffer, SniffError, running, tcp_push_filter
from whs_sniff.tcpdump import hook

USAGE = "Usage: whs_sniff {IFACE}"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Capture on the interface named in ``argv`` and print each PSH segment."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print(USAGE, file=sys.stderr)
        raise SystemExit(1)

    running.set()
    try:
        sniffer = Sniffer(args[0], tcp_push_filter, hook)
    except SniffError as exc:
        detail = f": {exc.__cause__}" if exc.__cause__ is not None else ""
        print(f"Error opening interface: {exc}{detail}", file=sys.stderr)
        return 1

    print("Starting whs_sniff", flush=True)
    with sniffer:
        try:
            while running.is_set() and not sniffer.has_error():
                sniffer.loop()
        except SniffError as exc:
            detail = f": {exc.__cause__}" if exc.__cause__ is not None else ""
            print(f"{exc}{detail}", file=sys.stderr)
        except KeyboardInterrupt:
            running.clear()
    return 0


if __name__ == "__main__":
    sys.exit(main())