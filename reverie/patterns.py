"""Linguistic marker detection for streamed reasoning text.

Each incoming chunk is tested against eleven independent rules, one per
cognitive category.  Rules are word-boundary keyword alternations, except
``question`` which only looks for a literal ``?``.  Matching is
case-insensitive and purely lexical - there is no tokenisation, stemming or
context, so a chunk that happens to split a keyword across two deltas will
simply not match it.

Several flags can be true for the same chunk.  Choosing what a chunk "means"
is left to the intensity ladder and the layer rules; :func:`dominant_category`
is only a label for observers such as a visual legend.
"""

import dataclasses
import re
import typing


CATEGORIES: typing.Tuple[str, ...] = (
	"uncertainty",
	"certainty",
	"revision",
	"question",
	"enumeration",
	"emphasis",
	"negation",
	"causation",
	"hedging",
	"comparison",
	"resolution",
)


MARKER_PATTERNS: typing.Dict[str, typing.Pattern[str]] = {
	"uncertainty": re.compile(r"\b(?:maybe|might|possibly|perhaps|could|seems|appears|uncertain|unsure|probably|likely)\b", re.IGNORECASE),
	"certainty": re.compile(r"\b(?:clearly|definitely|must|obviously|certainly|surely|indeed|undoubtedly|always|never)\b", re.IGNORECASE),
	"revision": re.compile(r"\b(?:actually|wait|however|but|although|though|yet|nevertheless|nonetheless|no,|hmm|reconsider|rethink)\b", re.IGNORECASE),
	"question": re.compile(r"\?"),
	"enumeration": re.compile(r"\b(?:first|second|third|next|then|finally|lastly|step \d+|initially|subsequently|\d+\)|\d+\.)\b", re.IGNORECASE),
	"emphasis": re.compile(r"\b(?:really|very|extremely|quite|highly|particularly|especially|significantly|crucially|absolutely)\b", re.IGNORECASE),
	"negation": re.compile(r"\b(?:not|never|won't|can't|isn't|aren't|wasn't|weren't|don't|doesn't|didn't|no\b)\b", re.IGNORECASE),
	"causation": re.compile(r"\b(?:because|therefore|thus|hence|consequently|as a result|so|since|given that|due to)\b", re.IGNORECASE),
	"hedging": re.compile(r"\b(?:sort of|kind of|somewhat|relatively|fairly|rather|more or less|approximately)\b", re.IGNORECASE),
	"comparison": re.compile(r"\b(?:similar|different|unlike|whereas|compared to|in contrast|on the other hand|alternatively)\b", re.IGNORECASE),
	"resolution": re.compile(r"\b(?:in conclusion|to summarize|ultimately|in the end|overall|in summary|final|conclusion)\b", re.IGNORECASE),
}


@dataclasses.dataclass (frozen=True)
class PatternFlags:

	"""
	The eleven category flags detected in a single chunk.
	"""

	uncertainty: bool = False
	certainty: bool = False
	revision: bool = False
	question: bool = False
	enumeration: bool = False
	emphasis: bool = False
	negation: bool = False
	causation: bool = False
	hedging: bool = False
	comparison: bool = False
	resolution: bool = False


	def active (self) -> typing.List[str]:

		"""
		Return the names of the flags that are set, in category order.
		"""

		return [name for name in CATEGORIES if getattr(self, name)]


	def has_any (self) -> bool:

		"""Return True if at least one flag is set."""

		return any(getattr(self, name) for name in CATEGORIES)


	def as_dict (self) -> typing.Dict[str, bool]:

		"""Return the flags as a plain ``{category: bool}`` dict."""

		return {name: getattr(self, name) for name in CATEGORIES}


def detect (text: str) -> PatternFlags:

	"""
	Test a chunk of text against every marker rule.

	The result depends only on ``text``.  Empty or whitespace-only input
	returns a record with every flag cleared.

	Example:
		```python
		flags = detect("Well, maybe we should reconsider.")
		assert flags.uncertainty and flags.revision
		```
	"""

	if not text or not text.strip():
		return PatternFlags()

	return PatternFlags(**{
		name: pattern.search(text) is not None
		for name, pattern in MARKER_PATTERNS.items()
	})


# Label precedence follows the intensity ladder, then the categories that
# the ladder only reaches through the emphasis bonus or not at all.
LABEL_PRECEDENCE: typing.Tuple[str, ...] = (
	"revision",
	"resolution",
	"certainty",
	"uncertainty",
	"hedging",
	"enumeration",
	"question",
	"causation",
	"emphasis",
	"negation",
	"comparison",
)

NEUTRAL_LABEL = "neutral"


def dominant_category (flags: PatternFlags) -> str:

	"""
	Pick the single category that labels a chunk, first match wins.

	Returns ``"neutral"`` when no flag is set.
	"""

	for name in LABEL_PRECEDENCE:
		if getattr(flags, name):
			return name

	return NEUTRAL_LABEL
