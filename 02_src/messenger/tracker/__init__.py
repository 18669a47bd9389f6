"""Tracker module."""

from .tracker import IUpdateTracker, UpdateTracker

__all__ = ["IUpdateTracker", "UpdateTracker"]
