"""
Network Monitor - tracks connectivity and raises a one-shot offline alert
"""
import logging
import socket
from enum import Enum
from typing import Dict

logger = logging.getLogger(__name__)

ALERT_TITLE = "No Internet Connection"
ALERT_MESSAGE = (
    "This app requires an internet connection to function properly. "
    "Please check your network settings and try again."
)


class ConnectionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


def probe_connectivity(host: str, port: int, timeout: float = 3.0) -> bool:
    """Reachability check: can a TCP connection to host:port be opened?"""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError as e:
        logger.debug(f"Connectivity probe to {host}:{port} failed: {str(e)}")
        return False


class NetworkMonitor:
    """
    Connectivity observer.

    The first path update only initializes the state, even when it
    reports "offline"; the deferred check_initial_connection() covers
    that case after a short grace period. Later, losing the connection
    sets show_alert until acknowledge_alert() is called.
    """

    def __init__(self):
        self.state = ConnectionState.UNINITIALIZED
        self.show_alert = False

    @property
    def has_initialized(self) -> bool:
        return self.state != ConnectionState.UNINITIALIZED

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def update(self, is_connected: bool) -> None:
        """Record one path update from the reachability probe."""
        previous = self.state
        self.state = ConnectionState.CONNECTED if is_connected else ConnectionState.DISCONNECTED

        if previous == self.state:
            return

        if previous == ConnectionState.CONNECTED and not is_connected:
            self.show_alert = True
            logger.warning("Network connection lost")
        else:
            logger.info(f"Network state: {previous.value} -> {self.state.value}")

    def check_initial_connection(self) -> None:
        """Deferred startup check: alert if the first observation was 'offline'."""
        if self.has_initialized and not self.is_connected:
            self.show_alert = True
            logger.warning("No network connection at startup")

    def acknowledge_alert(self) -> None:
        self.show_alert = False

    def status(self) -> Dict:
        return {
            "state": self.state.value,
            "is_connected": self.is_connected,
            "show_alert": self.show_alert,
            "alert_title": ALERT_TITLE if self.show_alert else None,
            "alert_message": ALERT_MESSAGE if self.show_alert else None,
        }
