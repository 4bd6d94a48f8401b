"""Hazard monitoring and alert lifecycle engine.

Polls weather/air-quality and seismic signals for a fixed set of
locations, evaluates threshold rules, and maintains the active alert
per (disaster, location) with full history.
"""

__version__ = "1.0.0"
