"""Application layer: CLI, presets, session wiring and explain tracing."""
