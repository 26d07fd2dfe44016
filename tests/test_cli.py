import socket
import struct

import pytest

from whs_sniff.cli import main
from whs_sniff.sniff import handle_signal, running


def _frame(flags: int, payload: bytes = b"hi") -> bytes:
    eth = bytes.fromhex("020000000001") + bytes.fromhex("020000000002") + b"\x08\x00"
    tcp = struct.pack("!HHIIBBHHH", 1234, 80, 1, 0, 0x50, flags, 1024, 0, 0)
    ip = struct.pack(
        "!BBHHHBBH4s4s",
        0x45,
        0,
        20 + len(tcp) + len(payload),
        0,
        0,
        64,
        6,
        0,
        socket.inet_aton("10.0.0.1"),
        socket.inet_aton("10.0.0.2"),
    )
    return eth + ip + tcp + payload


class FakeSocket:
    def __init__(self, script):
        self.script = list(script)
        self.closed = False
        self.bound = None

    def bind(self, address):
        self.bound = address

    def setsockopt(self, *args):
        pass

    def settimeout(self, value):
        pass

    def recv(self, bufsize):
        step = self.script.pop(0)
        if callable(step):
            step = step()
        if isinstance(step, BaseException):
            raise step
        return step

    def close(self):
        self.closed = True


@pytest.fixture
def install(monkeypatch):
    def _install(fake):
        monkeypatch.setattr(socket, "AF_PACKET", 17, raising=False)
        monkeypatch.setattr(socket, "socket", lambda *a, **k: fake)
        monkeypatch.setattr(socket, "if_nametoindex", lambda name: 1)
        return fake

    yield _install
    running.clear()


@pytest.mark.parametrize("argv", [[], ["eth0", "extra"]])
def test_wrong_argument_count_exits_with_usage(argv, capsys):
    with pytest.raises(SystemExit) as info:
        main(argv)
    assert info.value.code == 1
    assert "Usage" in capsys.readouterr().err


def test_open_failure_returns_one(monkeypatch, capsys):
    def refuse(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(socket, "AF_PACKET", 17, raising=False)
    monkeypatch.setattr(socket, "socket", refuse)
    assert main(["eth0"]) == 1
    captured = capsys.readouterr()
    assert "Fail: open device" in captured.err
    assert "Starting whs_sniff" not in captured.out


def test_reports_push_segment_and_stops_on_read_error(install, capsys):
    fake = install(FakeSocket([_frame(0x18), OSError("gone")]))
    assert main(["eth0"]) == 0
    captured = capsys.readouterr()
    assert captured.out.startswith("Starting whs_sniff\n")
    assert "===== PACKET #00001=====" in captured.out
    assert "- From: port 1234" in captured.out
    assert "----- END LOG -----" in captured.out
    assert "Error: pcap_next" in captured.err
    assert fake.closed
    assert fake.bound == ("eth0", 0)


def test_frames_without_push_are_skipped(install, capsys):
    install(FakeSocket([_frame(0x10), _frame(0x18), _frame(0x10), OSError("gone")]))
    assert main(["eth0"]) == 0
    out = capsys.readouterr().out
    assert out.count("===== PACKET #") == 1
    assert "===== PACKET #00001=====" in out


def test_stops_when_signal_clears_running(install, capsys):
    def interrupt():
        handle_signal(2, None)
        return TimeoutError()

    fake = install(FakeSocket([_frame(0x18), interrupt]))
    assert main(["eth0"]) == 0
    captured = capsys.readouterr()
    assert "===== PACKET #00001=====" in captured.out
    assert captured.err == ""
    assert not running.is_set()
    assert fake.closed
    assert fake.script == []