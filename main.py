"""Cloud Function Entry Point - Root Module.

Cloud Functions looks for targets in a root-level main.py; this module
re-exports the on-demand cycle functions from hazardwatch.main.
"""

from hazardwatch.main import (
    earthquake_check,
    weather_check,
)

__all__ = [
    "earthquake_check",
    "weather_check",
]
