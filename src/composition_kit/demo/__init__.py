"""Illustrative wiring: temperature sensor, alarms, lift and message inbox."""
