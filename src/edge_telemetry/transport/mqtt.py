"""
paho-mqtt adapter implementing the coordinator's Transport capability.

paho runs its network loop on a background thread. Every lifecycle callback
is marshalled onto the asyncio loop and fed to ``ConnectionMonitor.dispatch``
so state changes and cache replay happen on a single timeline.
"""

from __future__ import annotations

import asyncio
import math
import ssl
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

import paho.mqtt.client as mqtt
from loguru import logger

from ..coordinator.monitor import ConnectionMonitor, LinkEvent
from ..errors import PublishError, map_transport_error

_SCHEMES = {
    # scheme: (paho transport, tls, default port)
    "mqtt": ("tcp", False, 1883),
    "tcp": ("tcp", False, 1883),
    "mqtts": ("tcp", True, 8883),
    "ssl": ("tcp", True, 8883),
    "ws": ("websockets", False, 80),
    "wss": ("websockets", True, 443),
}


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int
    transport: str
    tls: bool
    path: str = "/"


@dataclass(frozen=True)
class TransportOptions:
    skip_certificate_validation: bool = True
    keepalive_seconds: int = 60
    reconnect_interval_ms: int = 5000
    publish_timeout_sec: float = 10.0
    qos: int = 0
    client_id: str = ""


def parse_endpoint(url: str) -> Endpoint:
    """Split a broker URL such as ``wss://host[:port][/path]``."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in _SCHEMES:
        raise ValueError(f"Unsupported broker scheme: {parts.scheme!r}")
    if not parts.hostname:
        raise ValueError(f"Broker URL has no host: {url!r}")
    transport, tls, default_port = _SCHEMES[scheme]
    return Endpoint(
        host=parts.hostname,
        port=parts.port or default_port,
        transport=transport,
        tls=tls,
        path=parts.path or "/",
    )


class MqttTransport:
    """Transport backed by a paho-mqtt 2.x client.

    Args:
        endpoint: broker URL (mqtt, mqtts, ws, wss)
        monitor: receives translated lifecycle events
        options: connection and publish options
        loop: event loop for callbacks (defaults to the running loop at connect)
        client: pre-built paho client (tests)
    """

    def __init__(
        self,
        endpoint: str,
        monitor: ConnectionMonitor,
        options: Optional[TransportOptions] = None,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        client: Optional[Any] = None,
    ):
        self.endpoint = parse_endpoint(endpoint)
        self._url = endpoint
        self._monitor = monitor
        self.options = options or TransportOptions()
        self._loop = loop
        self._started = False
        self._client = client if client is not None else self._build_client()
        self._bind_callbacks()

    def _build_client(self) -> mqtt.Client:
        ep, opts = self.endpoint, self.options
        client = mqtt.Client(
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            client_id=opts.client_id,
            transport=ep.transport,
        )
        if ep.transport == "websockets":
            client.ws_set_options(path=ep.path)
        if ep.tls:
            if opts.skip_certificate_validation:
                client.tls_set(cert_reqs=ssl.CERT_NONE)
                client.tls_insecure_set(True)
            else:
                client.tls_set()
        delay = max(1, math.ceil(opts.reconnect_interval_ms / 1000))
        client.reconnect_delay_set(min_delay=delay, max_delay=delay)
        return client

    def _bind_callbacks(self) -> None:
        self._client.on_pre_connect = self._on_pre_connect
        self._client.on_connect = self._on_connect
        self._client.on_connect_fail = self._on_connect_fail
        self._client.on_disconnect = self._on_disconnect

    # --- Transport capability ---

    def connect(self) -> None:
        """Start connecting in the background; failures surface as events.

        Once the network loop is running paho retries on its own every
        ``reconnect_interval_ms``. If ``connect_async`` itself raises (invalid
        host, port or keepalive) the loop is never started and nothing
        retries until the process is restarted with a corrected setting.
        """
        if self._started:
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        ep = self.endpoint
        logger.info(f"Attempting to connect to MQTT broker {self._url} ...")
        try:
            self._client.connect_async(ep.host, ep.port, keepalive=self.options.keepalive_seconds)
            self._client.loop_start()
        except (OSError, ValueError) as exc:
            err = map_transport_error(exc)
            logger.error(f"Broker not reachable: {err}")
            self._emit(LinkEvent.ERROR, str(err))
            self._emit(LinkEvent.OFFLINE)
            return
        self._started = True

    async def publish(self, topic: str, payload: str) -> None:
        info = self._enqueue(topic, payload)
        timeout = self.options.publish_timeout_sec
        try:
            await asyncio.to_thread(info.wait_for_publish, timeout)
        except (RuntimeError, ValueError) as exc:
            raise PublishError(str(exc)) from exc
        if not info.is_published():
            raise PublishError(f"publish not confirmed within {timeout:g}s")

    def publish_nowait(self, topic: str, payload: str) -> None:
        self._enqueue(topic, payload)

    def close(self) -> None:
        if not self._started:
            return
        self._started = False
        self._loop = None  # events caused by our own disconnect are not dispatched
        try:
            self._client.disconnect()
        finally:
            self._client.loop_stop()
        logger.info("MQTT client closed")

    def _enqueue(self, topic: str, payload: str):
        try:
            info = self._client.publish(topic, payload, qos=self.options.qos)
        except (ValueError, TypeError) as exc:
            # wildcard topic, oversized payload, bad qos
            raise PublishError(str(exc)) from exc
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(mqtt.error_string(info.rc))
        return info

    # --- paho callbacks (network thread) ---

    def _emit(self, event: LinkEvent, detail: Optional[str] = None) -> None:
        if self._loop is None or self._loop.is_closed():
            logger.debug(f"Dropping {event.value} event: no event loop")
            return
        asyncio.run_coroutine_threadsafe(self._monitor.dispatch(event, detail), self._loop)

    def _on_pre_connect(self, client, userdata) -> None:
        self._emit(LinkEvent.RECONNECTING)

    def _on_connect(self, client, userdata, flags, reason_code, properties) -> None:
        if reason_code.is_failure:
            self._emit(LinkEvent.ERROR, f"connection refused: {reason_code}")
        else:
            self._emit(LinkEvent.CONNECTED)

    def _on_connect_fail(self, client, userdata) -> None:
        self._emit(LinkEvent.ERROR, "broker unreachable")
        self._emit(LinkEvent.OFFLINE)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties) -> None:
        self._emit(LinkEvent.DISCONNECTED, str(reason_code))
