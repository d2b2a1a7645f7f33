"""Save and load chunk transcripts for replay.

A transcript is the ordered list of text chunks an engine accepted while
``record=True``.  On disk it is JSON lines, one ``{"text": ...}`` object per
chunk, which keeps whitespace-only and multi-line chunks intact.
"""

import json
import logging
import typing


logger = logging.getLogger(__name__)


def save (path: str, chunks: typing.Iterable[str]) -> int:

	"""Write chunks to ``path`` and return how many were written."""

	count = 0

	with open(path, "w", encoding="utf-8") as f:
		for text in chunks:
			f.write(json.dumps({"text": text}) + "\n")
			count += 1

	logger.info(f"Saved {count} chunks to {path}")

	return count


def load (path: str) -> typing.List[str]:

	"""
	Read chunks back from ``path``.

	Blank lines are skipped.  Raises ``ValueError`` naming the line number
	when a line is not a ``{"text": <string>}`` object.
	"""

	chunks: typing.List[str] = []

	with open(path, "r", encoding="utf-8") as f:

		for line_number, line in enumerate(f, start=1):

			if not line.strip():
				continue

			try:
				entry = json.loads(line)
			except json.JSONDecodeError as e:
				raise ValueError(f"{path}:{line_number}: invalid JSON ({e.msg})") from e

			if not isinstance(entry, dict) or not isinstance(entry.get("text"), str):
				raise ValueError(f"{path}:{line_number}: expected an object with a 'text' string")

			chunks.append(entry["text"])

	logger.info(f"Loaded {len(chunks)} chunks from {path}")

	return chunks
