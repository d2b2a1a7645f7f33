"""Phase scales, as MIDI note numbers rooted on C4 (60).

Each reasoning phase has a mode whose colour matches it.  The flourish uses
``CONCLUDING``; the other scales are exposed so that observers can colour
their own output by phase.
"""

import typing


QUESTIONING: typing.List[int] = [60, 62, 64, 66, 67, 69, 71]   # Lydian
BACKTRACKING: typing.List[int] = [60, 61, 63, 65, 66, 68, 70]  # Locrian
REASONING: typing.List[int] = [60, 62, 63, 65, 67, 69, 70]     # Dorian
CONCLUDING: typing.List[int] = [60, 62, 64, 65, 67, 69, 71]    # Ionian
THINKING: typing.List[int] = [60, 62, 65, 67, 69]              # Major pentatonic
IDLE: typing.List[int] = [60]

PHASE_SCALES: typing.Dict[str, typing.List[int]] = {
	"questioning": QUESTIONING,
	"backtracking": BACKTRACKING,
	"reasoning": REASONING,
	"concluding": CONCLUDING,
	"thinking": THINKING,
	"idle": IDLE,
}
