"""Tests for the node daemon on a simulated radio."""

import os
import sys
import threading

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.config import Config
from common.errors import ConfigError
from common.results import TransportResult
from node import daemon as daemon_module
from node.daemon import NodeDaemon
from node.stack import build_session
from transport.memory import InMemoryRadio, InMemoryRadioBus


def sim_config(node: int, name: str) -> Config:
    return Config(
        name=name,
        node_address=node,
        port=node,
        ack_timeout_ms=1000,
        ack_delay_ms=0,
        segment_spacing_ms=0,
        retry_delay_ms=0,
        simulate_radio=True,
    ).validate()


def test_send_and_reply() -> None:
    """Test a replying daemon answers the sender with its greeting."""
    bus = InMemoryRadioBus()
    cube = NodeDaemon(sim_config(0x0B, "cube1"), bus=bus)
    rover = NodeDaemon(sim_config(0x0A, "rover"), bus=bus)
    cube.start()
    rover.start()

    thread = threading.Thread(target=cube.run, kwargs={"reply": True, "timeout": 0.2}, daemon=True)
    thread.start()
    try:
        result = rover.send(b"LED:RED", dest_port=0x0B)
        reply = rover.listen(timeout=3.0)
    finally:
        cube.stop()
        thread.join(timeout=5.0)
        rover.stop()

    assert result is TransportResult.SUCCESS
    assert reply.ok
    assert reply.source_port == 0x0B
    text = reply.message.decode("utf-8")
    assert "port 0a" in text
    assert "This is cube1, at port 0b" in text
    assert "received 1 messages" in text
    assert cube.messages_received == 1
    assert not thread.is_alive()


def test_listen_timeout() -> None:
    node = NodeDaemon(sim_config(0x0B, "cube1"))
    node.start()
    try:
        reception = node.listen(timeout=0.05)
    finally:
        node.stop()

    assert reception.result is TransportResult.TIMEOUT
    assert node.messages_received == 0


def test_compose_reply() -> None:
    node = NodeDaemon(sim_config(0x0C, "cube2"))

    reply = node.compose_reply(0x0D)

    assert reply.startswith(b"Hello, whoever lives at port 0d. This is cube2, at port 0c.\r\n")


def test_frame_size_mismatch() -> None:
    """Test the stack refuses a radio with a different frame width."""
    with pytest.raises(ConfigError):
        build_session(sim_config(0x0A, "cube0"), InMemoryRadio(0x0A0A0A0A, frame_size=16))


def test_main_listen_timeout(monkeypatch) -> None:
    """Test the CLI exits with 1 when no message arrives."""
    monkeypatch.setattr(
        sys, "argv", ["cubenet-node", "--simulate", "--listen", "--timeout", "0.05"]
    )

    with pytest.raises(SystemExit) as excinfo:
        daemon_module.main()

    assert excinfo.value.code == 1


def test_port_argument() -> None:
    assert daemon_module._port("0x0B") == 0x0B
    assert daemon_module._port("12") == 12


def test_main_list_nodes(monkeypatch, capsys) -> None:
    """Test --list-nodes prints the shipped profiles without opening a radio."""
    monkeypatch.setattr(sys, "argv", ["cubenet-node", "--list-nodes"])

    daemon_module.main()

    names = capsys.readouterr().out.split()
    assert names == ["cube0", "cube1", "cube2", "rover"]
