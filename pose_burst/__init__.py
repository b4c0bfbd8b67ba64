"""Pose-triggered explosion overlay for an instructional video."""

__version__ = "0.1.0"
