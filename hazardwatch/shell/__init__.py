"""Imperative Shell - I/O and side effects.

Everything that touches the network or the database lives here:
- USGS seismic feed client (HTTP)
- Open-Meteo weather/air-quality client (HTTP)
- Relational store (SQLAlchemy)
- Configuration loading (environment/files)

Clients translate failures into hazardwatch.exceptions types; decisions
stay in hazardwatch.core.
"""

from hazardwatch.shell.usgs_client import USGSClient
from hazardwatch.shell.weather_client import WeatherClient
from hazardwatch.shell.store import HazardStore
from hazardwatch.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "USGSClient",
    "WeatherClient",
    "HazardStore",
    "load_config",
    "load_config_from_env",
]
