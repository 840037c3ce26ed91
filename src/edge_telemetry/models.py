"""
Pydantic models for the trailer telemetry snapshot.

Every section is frozen so a record is never mutated once built; the
published/cached form is ``TrailerSnapshot.model_dump(mode="json")``.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Battery(_Section):
    """Battery bank readings."""

    current_level: int
    voltage: float
    current_draw: float
    temperature: float
    cycles: int
    health: str
    last_charged: str
    estimated_runtime: str
    charging_status: str

    @field_validator("current_level")
    @classmethod
    def _validate_level(cls, v):
        if not 0 <= v <= 100:
            raise ValueError("Battery level must be between 0 and 100")
        return v


class Lighting(_Section):
    overall_brightness: str
    interior_lights: str
    exterior_lights: str
    work_lights: str
    emergency_lights: str
    power_consumption: str
    led_health: str
    schedule: str


class Security(_Section):
    system_status: str
    active_cameras: str
    motion_detection: str
    door_status: str
    window_status: str
    alarm_history: str
    access_log: str
    remote_access: str


class Water(_Section):
    fresh_water: str
    gray_water: str
    water_pressure: str
    water_temperature: str
    pump_status: str
    filter_status: str
    daily_usage: str
    leak_detection: str


class Network(_Section):
    wifi_status: str
    signal_strength: str
    bandwidth: str
    data_usage: str
    cellular_signal: str
    satellite_backup: str
    connected_devices: int
    network_security: str


class Climate(_Section):
    interior_temperature: str
    target_temperature: str
    humidity: str
    hvac_mode: str
    fan_speed: str
    air_quality: str
    filter_status: str
    energy_usage: str


class Vehicle(_Section):
    """Static vehicle identity plus the two odometer-style readings."""

    vehicle_id: str
    make_model: str
    year: int
    vin: str
    license_plate: str
    mileage: str
    last_service: str
    next_service: str
    insurance_expires: str
    registration_expires: str
    dimensions: str
    weight: str
    capacity: str
    generator: str
    electrical: str

    @field_validator("vin")
    def _upcase_vin(cls, v):
        return v.upper()


class TrailerSnapshot(_Section):
    """One tick's worth of trailer telemetry."""

    timestamp: datetime
    battery: Battery
    lighting: Lighting
    security: Security
    water: Water
    network: Network
    climate: Climate
    vehicle: Vehicle
