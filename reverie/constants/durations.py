"""Note durations and sequencing offsets, in **seconds**.

Layer envelopes are owned by the backend, but each note still needs a
length so the backend knows when to release it.  Lengths are expressed at a
nominal 120 BPM, where one quarter note lasts half a second::

    import reverie.constants.durations as dur

    backend.note_on("bass", 110.0, 0.4)
    scheduler.schedule(dur.QUARTER, lambda: backend.note_off("bass", 110.0))
"""

NOMINAL_BPM = 120

WHOLE = 2.0
HALF = 1.0
QUARTER = 0.5
EIGHTH = 0.25
SIXTEENTH = 0.125
THIRTYSECOND = 0.0625

# Inter-note spacing for sequenced triggers.
DESCENDING_RUN_SPACING = 0.030
ARPEGGIO_SPACING = 0.040
TRIAD_SPACING = 0.020
EMPHASIS_BURST_SPACING = 0.025
FLOURISH_SPACING = 0.100

NOISE_BURST = 0.150

# Replay pacing before the speed divisor is applied.
REPLAY_BASE_DELAY = 0.100
