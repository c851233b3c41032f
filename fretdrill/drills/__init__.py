"""Drills: fretboard -> note and staff -> note rounds on a shared base."""
