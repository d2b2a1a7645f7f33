"""Constants for Reverie.

- ``reverie.constants.durations`` - Note lengths and scheduling offsets in seconds
- ``reverie.constants.scales`` - Phase scales as MIDI note numbers (C4 = 60)
"""
