"""
Unit tests for error mapping.
"""

import errno
import socket
import ssl

from edge_telemetry.errors import (
    EdgeTelemetryError,
    PublishError,
    TransportUnavailable,
    map_transport_error,
)


def test_timeout_maps_to_publish_error():
    assert isinstance(map_transport_error(TimeoutError("ack")), PublishError)


def test_socket_errors_map_to_unavailable():
    assert isinstance(map_transport_error(ConnectionRefusedError()), TransportUnavailable)
    assert isinstance(map_transport_error(socket.gaierror("Name or service not known")), TransportUnavailable)
    assert isinstance(
        map_transport_error(OSError(errno.EHOSTUNREACH, "No route to host")), TransportUnavailable
    )


def test_any_os_error_maps_to_unavailable_with_message():
    for exc in (OSError(errno.EACCES, "Permission denied"), ssl.SSLError("handshake failure")):
        mapped = map_transport_error(exc)
        assert isinstance(mapped, TransportUnavailable)
        assert str(mapped) == str(exc)


def test_taxonomy_passthrough_and_fallback():
    err = PublishError("queue full")
    assert map_transport_error(err) is err
    mapped = map_transport_error(RuntimeError("weird"))
    assert isinstance(mapped, EdgeTelemetryError)
    assert "weird" in str(mapped)
