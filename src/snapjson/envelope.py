"""Wire types for the serialized envelope.

Shape::

    {"json": <plain tree>, "meta": {"values": {<path>: <annotation>}}}

``meta`` is omitted entirely when nothing needed an annotation.
"""

from __future__ import annotations

from typing import Literal, NotRequired, TypeAlias, TypedDict

JsonPrimitive: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]

SimpleAnnotation: TypeAlias = Literal[
	"undefined",
	"bigint",
	"Date",
	"Error",
	"regexp",
	"set",
	"map",
	"number",
	"URL",
]
# ["typed-array", "Int16Array"]; tuples are accepted when decoding
CompoundAnnotation: TypeAlias = list[str] | tuple[str, str]
Annotation: TypeAlias = SimpleAnnotation | CompoundAnnotation


class Meta(TypedDict):
	values: dict[str, Annotation]


class Envelope(TypedDict):
	json: JsonValue
	meta: NotRequired[Meta]
