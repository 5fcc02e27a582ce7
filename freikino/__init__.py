"""Playback core of a video player: audio mixing and clocking, frame queues, and overlays that emit drawing commands."""

__version__ = "0.1.0"