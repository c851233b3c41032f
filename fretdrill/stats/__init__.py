"""Performance stats per fretboard position."""
