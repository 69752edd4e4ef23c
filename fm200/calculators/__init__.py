"""
Deterministic calculation engine.

Pure Python math. No I/O, no shared state.
Given a validated RoomInput, produce a SizingResult with agent mass,
cylinder count, nozzle count, and piping length.
"""
