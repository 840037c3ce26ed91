from .mqtt import Endpoint, MqttTransport, TransportOptions, parse_endpoint

__all__ = ["Endpoint", "MqttTransport", "TransportOptions", "parse_endpoint"]
