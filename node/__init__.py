"""Node assembly and daemon for the CubeNet radio stack."""

from node.daemon import NodeDaemon
from node.stack import build_session, build_simulated_session

__all__ = ["NodeDaemon", "build_session", "build_simulated_session"]
