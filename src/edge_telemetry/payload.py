"""
Synthetic trailer telemetry generator.

``generate()`` is a pure value constructor: no I/O, no state beyond the RNG.
The field set never changes between calls so the cache and the broker never
see a per-call schema.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Optional

from .models import (
    Battery,
    Climate,
    Lighting,
    Network,
    Security,
    TrailerSnapshot,
    Vehicle,
    Water,
)

Record = dict[str, Any]

DEFAULT_VEHICLE_ID = "TR-2024-003"

_QUALITY = ["Excellent", "Good", "Fair", "Poor"]

# Process-wide, unseeded: snapshots are not reproducible across runs.
_rng = random.Random()


def _randint(rng: random.Random, lo: int, hi: int) -> int:
    return rng.randint(lo, hi)


def _randfloat(rng: random.Random, lo: float, hi: float, decimals: int = 1) -> float:
    return round(rng.uniform(lo, hi), decimals)


def build_snapshot(
    now: Optional[datetime] = None,
    *,
    vehicle_id: str = DEFAULT_VEHICLE_ID,
    rng: Optional[random.Random] = None,
) -> TrailerSnapshot:
    """Build one validated snapshot model."""
    r = rng or _rng
    ts = now or datetime.now(timezone.utc)

    return TrailerSnapshot(
        timestamp=ts,
        battery=Battery(
            current_level=_randint(r, 0, 100),
            voltage=_randfloat(r, 120, 140),
            current_draw=_randfloat(r, 12.5, 35),
            temperature=_randfloat(r, 32, 125),
            cycles=_randint(r, 1000, 1500),
            health=r.choice(_QUALITY),
            last_charged=r.choice(["1 hour ago", "2 hours ago", "3 hours ago", "4 hours ago"]),
            estimated_runtime=f"{_randint(r, 10, 24)} hours",
            charging_status=r.choice(["Charging", "Not charging", "Full"]),
        ),
        lighting=Lighting(
            overall_brightness=f"{_randint(r, 0, 100)}%",
            interior_lights=r.choice(["On (100%)", "Off (0%)", "Dim (50%)"]),
            exterior_lights=r.choice(["On (100%)", "Off (0%)", "Auto (60%)"]),
            work_lights=r.choice(["On", "Off"]),
            emergency_lights=r.choice(["Standby", "Active"]),
            power_consumption=f"{_randint(r, 100, 300)}W",
            led_health=f"{_randint(r, 80, 100)}%",
            schedule=r.choice(["Auto sunset/sunrise", "Manual", "Off"]),
        ),
        security=Security(
            system_status=r.choice(["Armed", "Disarmed"]),
            active_cameras=f"{_randint(r, 0, 4)} of 4",
            motion_detection=r.choice(["Active", "Inactive"]),
            door_status=r.choice(["All locked", "Front unlocked"]),
            window_status="All secure",
            alarm_history="No recent alerts",
            access_log=f"{_randint(r, 0, 5)} entries today",
            remote_access=r.choice(["Enabled", "Disabled"]),
        ),
        water=Water(
            fresh_water=f"{_randint(r, 0, 100)}% ({_randint(r, 100, 200)}L)",
            gray_water=f"{_randint(r, 0, 100)}% ({_randint(r, 0, 100)}L)",
            water_pressure=f"{_randint(r, 30, 60)} PSI",
            water_temperature=f"{_randint(r, 60, 80)}°F",
            pump_status=r.choice(["Auto", "Manual", "Off"]),
            filter_status=f"Good -{_randint(r, 80, 100)}%",
            daily_usage=f"{_randint(r, 20, 80)}L",
            leak_detection="No leaks detected",
        ),
        network=Network(
            wifi_status=r.choice(["Connected", "Disconnected"]),
            signal_strength=f"{_randint(r, -90, -40)} dBm ({r.choice(_QUALITY)})",
            bandwidth=f"{_randint(r, 50, 200)} Mbps down / {_randint(r, 10, 100)} Mbps up",
            data_usage=f"{_randfloat(r, 0.5, 5.0)} GB today",
            cellular_signal=f"{_randint(r, 1, 4)} bars ({r.choice(['LTE', '5G'])})",
            satellite_backup=r.choice(["Available", "Unavailable"]),
            connected_devices=_randint(r, 5, 15),
            network_security="WPA3 Encrypted",
        ),
        climate=Climate(
            interior_temperature=f"{_randint(r, 60, 80)}°F",
            target_temperature=f"{_randint(r, 65, 85)}°F",
            humidity=f"{_randint(r, 30, 70)}%",
            hvac_mode=r.choice(["Auto", "Cool", "Heat", "Off"]),
            fan_speed=f"{r.choice([1, 2, 3, 4])} (Medium)",
            air_quality=r.choice(["Good", "Fair", "Poor"]),
            filter_status=r.choice(["Clean", "Replace soon"]),
            energy_usage=f"{_randfloat(r, 0.5, 2.0)} kW/h",
        ),
        vehicle=Vehicle(
            vehicle_id=vehicle_id,
            make_model="Winnebago Studio Series Pro",
            year=2023,
            vin="1FDWE3FL6DDA12347",
            license_plate="STU003B",
            mileage=f"{_randint(r, 10000, 20000)} miles",
            last_service="January 15, 2024",
            next_service="April 15, 2024",
            insurance_expires="December 31, 2024",
            registration_expires="March 31, 2025",
            dimensions="53' L × 8.5' W × 13.6' H",
            weight=f"{_randint(r, 30000, 35000)} lbs",
            capacity="12 people",
            generator="60kW Diesel Backup",
            electrical="400A 3-Phase Hookup",
        ),
    )


def generate(
    now: Optional[datetime] = None,
    *,
    vehicle_id: str = DEFAULT_VEHICLE_ID,
    rng: Optional[random.Random] = None,
) -> Record:
    """Return one JSON-ready telemetry record."""
    return build_snapshot(now, vehicle_id=vehicle_id, rng=rng).model_dump(mode="json")
