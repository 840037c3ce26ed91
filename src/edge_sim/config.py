from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from edge_telemetry.transport import TransportOptions, parse_endpoint


class SimulatorSettings(BaseSettings):
    """Runtime settings, read from ``EDGE_*`` environment variables or ``.env``."""

    broker_url: str = "wss://mqtt-broker-z9f6.onrender.com"
    topic: str = "trailer/data"
    cache_file: str = "cached_data.json"
    publish_interval_sec: float = 10.0
    skip_certificate_validation: bool = True
    keepalive_seconds: int = 60
    reconnect_interval_ms: int = 5000
    publish_timeout_sec: float = 10.0
    qos: int = 0
    client_id: str = ""
    vehicle_id: str = "TR-2024-003"
    metrics_port: Optional[int] = None
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="EDGE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("broker_url")
    @classmethod
    def _validate_broker_url(cls, v):
        parse_endpoint(v)
        return v

    @field_validator("topic")
    @classmethod
    def _validate_topic(cls, v):
        if not v:
            raise ValueError("topic must not be empty")
        if "+" in v or "#" in v:
            raise ValueError("wildcards are not allowed in a publish topic")
        if "\x00" in v:
            raise ValueError("topic must not contain NUL")
        if len(v.encode("utf-8")) > 65535:
            raise ValueError("topic longer than 65535 bytes")
        return v

    @field_validator("publish_interval_sec", "publish_timeout_sec")
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("keepalive_seconds", "reconnect_interval_ms")
    @classmethod
    def _non_negative(cls, v):
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("qos")
    @classmethod
    def _validate_qos(cls, v):
        if v not in (0, 1, 2):
            raise ValueError("qos must be 0, 1 or 2")
        return v

    @field_validator("log_level")
    @classmethod
    def _upcase_level(cls, v):
        return v.upper()

    @property
    def transport_options(self) -> TransportOptions:
        return TransportOptions(
            skip_certificate_validation=self.skip_certificate_validation,
            keepalive_seconds=self.keepalive_seconds,
            reconnect_interval_ms=self.reconnect_interval_ms,
            publish_timeout_sec=self.publish_timeout_sec,
            qos=self.qos,
            client_id=self.client_id,
        )


@lru_cache()
def get_settings() -> SimulatorSettings:
    return SimulatorSettings()
