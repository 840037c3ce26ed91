"""
Connection state tracking driven by broker lifecycle events.

The transport translates its native callbacks into ``LinkEvent`` values and
hands them to ``ConnectionMonitor.dispatch``. The monitor is the only writer
of the connection state; everything else reads it through ``is_connected()``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from loguru import logger

from ..metrics.registry import metrics_registry
from .types import ConnectedCallback


class ConnectionState(str, Enum):
    """Link state as last reported by the broker client."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    OFFLINE = "offline"


class LinkEvent(str, Enum):
    """Broker lifecycle events consumed by the monitor."""

    CONNECTED = "connected"
    ERROR = "error"
    DISCONNECTED = "disconnected"
    OFFLINE = "offline"
    RECONNECTING = "reconnecting"


ALERT_BROKER_UNAVAILABLE = "ALERT: MQTT broker not available. Caching data locally..."
ALERT_CONNECTION_LOST = "ALERT: MQTT connection lost. Caching future data..."


class ConnectionMonitor:
    """Last-write-wins connection state plus on-connected listeners.

    Listeners run only on a transition *into* CONNECTED, once per
    transition. A failing listener is logged and does not stop the others.

    Example:
        monitor = ConnectionMonitor()
        monitor.on_connected(coordinator.replay_cache)
        await monitor.dispatch(LinkEvent.CONNECTED)
    """

    def __init__(self) -> None:
        self._state = ConnectionState.DISCONNECTED
        self._listeners: list[ConnectedCallback] = []
        self._transitions = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def transitions(self) -> int:
        """Number of transitions into CONNECTED observed so far."""
        return self._transitions

    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def on_connected(self, callback: ConnectedCallback) -> None:
        """Register an async callable run on each transition into CONNECTED."""
        if callback not in self._listeners:
            self._listeners.append(callback)
            logger.debug(f"Connected listener added (total: {len(self._listeners)})")

    def remove_listener(self, callback: ConnectedCallback) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    async def dispatch(self, event: LinkEvent, detail: Optional[str] = None) -> ConnectionState:
        """Apply one lifecycle event and return the resulting state."""
        previous = self._state
        self._state = self._next_state(previous, event)
        metrics_registry.link_events_total.labels(event=event.value).inc()

        if event is LinkEvent.CONNECTED:
            logger.success("Connected to MQTT broker")
        elif event is LinkEvent.ERROR:
            logger.error(f"MQTT error: {detail or 'unknown'}")
            logger.warning(ALERT_BROKER_UNAVAILABLE)
        elif event is LinkEvent.DISCONNECTED:
            logger.warning(f"Disconnected from MQTT broker{f' ({detail})' if detail else ''}")
            logger.warning(ALERT_CONNECTION_LOST)
        elif event is LinkEvent.OFFLINE:
            logger.warning("MQTT client is offline")
        else:
            logger.info("Attempting to reconnect to MQTT broker...")

        if previous is not ConnectionState.CONNECTED and self._state is ConnectionState.CONNECTED:
            self._transitions += 1
            await self._notify_connected()
        return self._state

    @staticmethod
    def _next_state(current: ConnectionState, event: LinkEvent) -> ConnectionState:
        if event is LinkEvent.CONNECTED:
            return ConnectionState.CONNECTED
        if event is LinkEvent.ERROR:
            # Transient signal: only demote a link we believed was up.
            if current is ConnectionState.CONNECTED:
                return ConnectionState.DISCONNECTED
            return current
        if event is LinkEvent.DISCONNECTED:
            return ConnectionState.DISCONNECTED
        if event is LinkEvent.OFFLINE:
            return ConnectionState.OFFLINE
        return ConnectionState.CONNECTING

    async def _notify_connected(self) -> None:
        for callback in list(self._listeners):
            try:
                await callback()
            except Exception as exc:
                logger.error(f"Connected listener failed: {type(exc).__name__}: {exc}")
