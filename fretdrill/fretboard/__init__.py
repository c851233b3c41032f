"""Fretboard geometry: tunings, profiles, positions and study highlights."""
