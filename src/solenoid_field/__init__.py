"""Solenoid field particle visualizer."""

__version__ = "0.1.0"
