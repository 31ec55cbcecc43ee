"""Classification of runtime values.

Every value falls into exactly one kind. The extended kinds are checked in the
same order as the rules in `snapjson.rules`, so that `classify()` and
`Registry.match()` always agree.
"""

from __future__ import annotations

import array
import datetime as dt
import math
import re
from collections.abc import Mapping
from typing import Any, Literal, TypeGuard

import httpx

from snapjson.values import UNDEFINED, OrderedMap

# Largest integer a JS number holds exactly (Number.MAX_SAFE_INTEGER).
MAX_SAFE_INTEGER = 2**53 - 1

# array.array typecodes that hold characters rather than numbers
_CHARACTER_TYPECODES = frozenset({"u", "w"})

ExtendedKind = Literal[
	"undefined",
	"bigint",
	"Date",
	"Error",
	"regexp",
	"set",
	"map",
	"number",
	"URL",
	"typed-array",
]
Kind = Literal["primitive", "list", "object", "passthrough"] | ExtendedKind


def is_undefined(value: Any) -> bool:
	return value is UNDEFINED


def is_bigint(value: Any) -> TypeGuard[int]:
	if not isinstance(value, int) or isinstance(value, bool):
		return False
	return value > MAX_SAFE_INTEGER or value < -MAX_SAFE_INTEGER


def is_date(value: Any) -> TypeGuard[dt.datetime]:
	return isinstance(value, dt.datetime)


def is_error(value: Any) -> TypeGuard[BaseException]:
	return isinstance(value, BaseException)


def is_regexp(value: Any) -> TypeGuard[re.Pattern[str]]:
	return isinstance(value, re.Pattern) and isinstance(value.pattern, str)


def is_set(value: Any) -> TypeGuard[set[Any] | frozenset[Any]]:
	return isinstance(value, (set, frozenset))


def is_plain_object(value: Any) -> TypeGuard[Mapping[str, Any]]:
	if not isinstance(value, Mapping):
		return False
	return all(isinstance(key, str) for key in value)


def is_map(value: Any) -> TypeGuard[Mapping[Any, Any]]:
	if isinstance(value, OrderedMap):
		return True
	return isinstance(value, Mapping) and not is_plain_object(value)


def is_nan(value: Any) -> bool:
	return isinstance(value, float) and math.isnan(value)


def is_infinite(value: Any) -> bool:
	return isinstance(value, float) and math.isinf(value)


def is_minus_zero(value: Any) -> bool:
	return isinstance(value, float) and value == 0.0 and math.copysign(1.0, value) < 0


def is_special_number(value: Any) -> TypeGuard[float]:
	return is_nan(value) or is_infinite(value) or is_minus_zero(value)


def is_url(value: Any) -> TypeGuard[httpx.URL]:
	return isinstance(value, httpx.URL) and value.is_absolute_url


def is_typed_array(value: Any) -> TypeGuard[array.array[Any]]:
	return (
		isinstance(value, array.array)
		and value.typecode not in _CHARACTER_TYPECODES
	)


def is_plain_list(value: Any) -> TypeGuard[list[Any] | tuple[Any, ...]]:
	return isinstance(value, (list, tuple))


def is_primitive(value: Any) -> bool:
	"""True for values the plain tree holds as-is.

	Big integers and the NaN/Infinity/-0 floats are excluded: a textual
	transport cannot tell them apart from ordinary numbers.
	"""
	if value is None or isinstance(value, (bool, str)):
		return True
	if isinstance(value, int):
		return not is_bigint(value)
	if isinstance(value, float):
		return not is_special_number(value)
	return False


_EXTENDED_CHECKS: tuple[tuple[ExtendedKind, Any], ...] = (
	("undefined", is_undefined),
	("bigint", is_bigint),
	("Date", is_date),
	("Error", is_error),
	("regexp", is_regexp),
	("set", is_set),
	("map", is_map),
	("number", is_special_number),
	("URL", is_url),
	("typed-array", is_typed_array),
)


def classify(value: Any) -> Kind:
	if is_primitive(value):
		return "primitive"
	for kind, check in _EXTENDED_CHECKS:
		if check(value):
			return kind
	if is_plain_list(value):
		return "list"
	if is_plain_object(value):
		return "object"
	return "passthrough"
