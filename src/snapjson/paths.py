"""Path codec for the annotation side table.

A traversal path is a sequence of keys (dict keys or list indices). On the
wire it becomes a single string::

    ["a", 0, "b.c"]   ->  "a.0.b\\.c"
    []                ->  ""          (the root)
    [""]              ->  "\\0"

- ``\\`` is doubled and ``.`` is escaped as ``\\.`` inside a segment.
- An empty segment is written as ``\\0`` so that ``[""]`` never collides
  with the root.

Decoding always yields string segments: the string form does not record
whether a segment was a list index. Callers that navigate a tree convert a
segment to an index when the container at hand is a list.
"""

from __future__ import annotations

from collections.abc import Iterable

from snapjson.errors import PathSyntaxError

PathKey = str | int
Path = tuple[PathKey, ...]

SEPARATOR = "."
ESCAPE = "\\"
EMPTY_SEGMENT = ESCAPE + "0"

ROOT = ""


def escape_segment(segment: PathKey) -> str:
	text = str(segment)
	if text == "":
		return EMPTY_SEGMENT
	return text.replace(ESCAPE, ESCAPE * 2).replace(SEPARATOR, ESCAPE + SEPARATOR)


def encode_path(segments: Iterable[PathKey]) -> str:
	return SEPARATOR.join(escape_segment(segment) for segment in segments)


def decode_path(text: str) -> list[str]:
	"""Split an encoded path back into its segments.

	Segments always come back as strings, so ``decode_path(encode_path(["items", 3]))``
	is ``["items", "3"]``: integer segments round-trip as their decimal text.
	"""
	if text == ROOT:
		return []

	result: list[str] = []
	segment: list[str] = []
	# An empty-segment marker must stand alone between separators.
	marker = False
	i = 0
	length = len(text)
	while i < length:
		char = text[i]
		if char == ESCAPE:
			if i + 1 >= length:
				raise PathSyntaxError(f"Dangling escape at end of path {text!r}")
			nxt = text[i + 1]
			if nxt in (ESCAPE, SEPARATOR):
				if marker:
					raise PathSyntaxError(f"Misplaced empty-segment marker in {text!r}")
				segment.append(nxt)
			elif nxt == "0":
				if marker or segment:
					raise PathSyntaxError(f"Misplaced empty-segment marker in {text!r}")
				marker = True
			else:
				raise PathSyntaxError(f"Invalid escape {char + nxt!r} in path {text!r}")
			i += 2
			continue
		if char == SEPARATOR:
			result.append("".join(segment))
			segment = []
			marker = False
			i += 1
			continue
		if marker:
			raise PathSyntaxError(f"Misplaced empty-segment marker in {text!r}")
		segment.append(char)
		i += 1

	result.append("".join(segment))
	return result
