"""Transform registry.

Each `Rule` pairs a predicate with a forward transform (extended value ->
plain data), an inverse transform (plain data + annotation -> extended value)
and the annotation recorded for the value.

Rules are tried in a fixed order; the first whose predicate accepts a value
wins. The order matches `snapjson.predicates.classify`.
"""

from __future__ import annotations

import array
import builtins
import datetime as dt
import logging
import re
import traceback
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from snapjson.envelope import Annotation
from snapjson.errors import UnknownAnnotationError
from snapjson.predicates import (
	is_bigint,
	is_date,
	is_error,
	is_map,
	is_nan,
	is_regexp,
	is_set,
	is_special_number,
	is_typed_array,
	is_undefined,
	is_url,
)
from snapjson.values import UNDEFINED, OrderedMap, RemoteError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Rule:
	kind: str
	check: Callable[[Any], bool]
	forward: Callable[[Any], Any]
	inverse: Callable[[Any, Annotation], Any]
	annotate: Callable[[Any], Annotation] | None = None

	def tag(self, value: Any) -> Annotation:
		if self.annotate is not None:
			return self.annotate(value)
		return self.kind  # pyright: ignore[reportReturnType]


def annotation_kind(annotation: Any) -> str | None:
	"""Kind name of a simple (``"set"``) or compound (``["typed-array", ...]``) tag."""
	if isinstance(annotation, str):
		return annotation
	if isinstance(annotation, (list, tuple)) and len(annotation) == 2:
		kind = annotation[0]
		if isinstance(kind, str):
			return kind
	return None


class Registry:
	"""Ordered, immutable collection of transform rules."""

	__slots__: tuple[str, ...] = ("_rules", "_by_kind")

	_rules: tuple[Rule, ...]
	_by_kind: dict[str, Rule]

	def __init__(self, rules: Iterable[Rule]) -> None:
		self._rules = tuple(rules)
		self._by_kind = {}
		for rule in self._rules:
			# The first rule registered for a kind handles decoding.
			self._by_kind.setdefault(rule.kind, rule)

	@property
	def rules(self) -> tuple[Rule, ...]:
		return self._rules

	def match(self, value: Any) -> Rule | None:
		for rule in self._rules:
			if rule.check(value):
				return rule
		return None

	def lookup(self, annotation: Annotation) -> Rule:
		kind = annotation_kind(annotation)
		rule = self._by_kind.get(kind) if kind is not None else None
		if rule is None:
			raise UnknownAnnotationError(f"Unknown transformation: {annotation!r}")
		return rule


# =============================================================================
# Timestamps
# =============================================================================


def _datetime_to_iso(value: dt.datetime) -> str:
	if value.tzinfo is None:
		value = value.replace(tzinfo=dt.UTC)
	else:
		value = value.astimezone(dt.UTC)
	# Millisecond precision matches JS Date.toISOString(); keep microseconds
	# only when they carry information.
	timespec = "milliseconds" if value.microsecond % 1000 == 0 else "microseconds"
	return value.isoformat(timespec=timespec).replace("+00:00", "Z")


def _datetime_from_iso(value: Any, _annotation: Annotation) -> dt.datetime:
	if not isinstance(value, str):
		raise TypeError(f"Date payload must be an ISO string, got {type(value)!r}")
	parsed = dt.datetime.fromisoformat(value)
	if parsed.tzinfo is None:
		return parsed.replace(tzinfo=dt.UTC)
	return parsed.astimezone(dt.UTC)


# =============================================================================
# Errors
# =============================================================================


def _error_name(exc: BaseException) -> str:
	if isinstance(exc, RemoteError):
		return exc.name
	return type(exc).__name__


def _error_message(exc: BaseException) -> str:
	if len(exc.args) == 1 and isinstance(exc.args[0], str):
		return exc.args[0]
	return str(exc)


def _error_stack(exc: BaseException) -> str | None:
	stack = getattr(exc, "stack", None)
	if isinstance(stack, str):
		return stack
	if exc.__traceback__ is None:
		return None
	return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def _error_to_plain(exc: BaseException) -> dict[str, Any]:
	plain: dict[str, Any] = {
		"name": _error_name(exc),
		"message": _error_message(exc),
		"stack": _error_stack(exc),
	}
	cause = exc.__cause__ if exc.__cause__ is not None else getattr(exc, "cause", None)
	if cause is not None:
		plain["cause"] = cause
	return plain


def _builtin_exception(name: str, message: str) -> BaseException | None:
	candidate = getattr(builtins, name, None)
	if not isinstance(candidate, type) or not issubclass(candidate, BaseException):
		return None
	try:
		return candidate(message)
	except TypeError:
		# e.g. UnicodeDecodeError, whose constructor wants five arguments
		return None


def _error_from_plain(value: Any, _annotation: Annotation) -> BaseException:
	if not isinstance(value, Mapping):
		raise TypeError(f"Error payload must be an object, got {type(value)!r}")
	name = value.get("name") or "Error"
	message = value.get("message") or ""
	if not isinstance(name, str) or not isinstance(message, str):
		raise TypeError("Error payload name and message must be strings")
	stack = value.get("stack")
	cause = value.get("cause")

	exc = _builtin_exception(name, message)
	if exc is None:
		exc = RemoteError(message, name=name, stack=stack)
	else:
		exc.stack = stack  # pyright: ignore[reportAttributeAccessIssue]

	if isinstance(cause, BaseException):
		exc.__cause__ = cause
	elif cause is not None:
		exc.cause = cause  # pyright: ignore[reportAttributeAccessIssue]
	return exc


# =============================================================================
# Patterns
# =============================================================================

_REGEX_FLAG_LETTERS: dict[str, re.RegexFlag] = {
	"a": re.ASCII,
	"i": re.IGNORECASE,
	"m": re.MULTILINE,
	"s": re.DOTALL,
	"x": re.VERBOSE,
}

# JS flags with no `re` counterpart: global, sticky, indices, unicode(-sets).
# Python str patterns are always unicode-aware.
_JS_ONLY_FLAGS = frozenset("gyduv")


def _regexp_to_plain(value: re.Pattern[str]) -> str:
	flags = "".join(
		letter
		for letter, flag in sorted(_REGEX_FLAG_LETTERS.items())
		if value.flags & flag
	)
	return f"/{value.pattern}/{flags}"


def _regexp_from_plain(value: Any, _annotation: Annotation) -> re.Pattern[str]:
	if not isinstance(value, str) or not value.startswith("/"):
		raise TypeError(f"regexp payload must look like '/source/flags', got {value!r}")
	end = value.rindex("/")
	if end == 0:
		raise ValueError(f"regexp payload is missing its closing slash: {value!r}")
	source = value[1:end]
	letters = value[end + 1 :]

	flags = 0
	dropped: list[str] = []
	for letter in letters:
		if letter in _REGEX_FLAG_LETTERS:
			flags |= _REGEX_FLAG_LETTERS[letter]
		elif letter in _JS_ONLY_FLAGS:
			dropped.append(letter)
		else:
			raise ValueError(f"Unknown regexp flag {letter!r} in {value!r}")
	if dropped:
		logger.debug("Dropping regexp flags %s from %r", "".join(dropped), value)
	return re.compile(source, flags)


# =============================================================================
# Sets and maps
# =============================================================================


def _freeze(value: Any) -> Any:
	"""Make a decoded element hashable.

	Plain lists and typed arrays come back as tuples, sets as frozensets.
	"""
	if isinstance(value, set):
		return frozenset(value)
	if isinstance(value, array.array):
		return tuple(value)
	if isinstance(value, list):
		return tuple(_freeze(item) for item in value)
	if isinstance(value, dict):
		return tuple((key, _freeze(item)) for key, item in value.items())
	return value


def _set_from_plain(value: Any, _annotation: Annotation) -> set[Any]:
	if not isinstance(value, list):
		raise TypeError(f"set payload must be an array, got {type(value)!r}")
	return {_freeze(item) for item in value}


def _map_to_plain(value: Mapping[Any, Any]) -> list[list[Any]]:
	return [[key, item] for key, item in value.items()]


def _map_from_plain(value: Any, _annotation: Annotation) -> OrderedMap:
	if not isinstance(value, list):
		raise TypeError(f"map payload must be an array of entries, got {type(value)!r}")
	result = OrderedMap()
	for entry in value:
		if not isinstance(entry, list) or len(entry) != 2:
			raise ValueError(f"map entry must be a [key, value] pair, got {entry!r}")
		key, item = entry
		result[_freeze(key)] = item
	return result


# =============================================================================
# Numbers
# =============================================================================


def _number_to_plain(value: float) -> str:
	if is_nan(value):
		return "NaN"
	if value == 0.0:
		return "-0"
	return "Infinity" if value > 0 else "-Infinity"


_SPECIAL_NUMBERS = frozenset({"NaN", "Infinity", "-Infinity", "-0"})


def _number_from_plain(value: Any, _annotation: Annotation) -> float:
	if value not in _SPECIAL_NUMBERS:
		raise ValueError(f"number payload must be one of {sorted(_SPECIAL_NUMBERS)}, got {value!r}")
	return float(value)


def _bigint_from_plain(value: Any, _annotation: Annotation) -> int:
	if not isinstance(value, str):
		raise TypeError(f"bigint payload must be a digit string, got {type(value)!r}")
	return int(value)


def _url_from_plain(value: Any, _annotation: Annotation) -> httpx.URL:
	if not isinstance(value, str):
		raise TypeError(f"URL payload must be a string, got {type(value)!r}")
	return httpx.URL(value)


# =============================================================================
# Typed arrays
# =============================================================================

TYPED_ARRAY = "typed-array"
_DEFAULT_TYPED_ARRAY = "Uint8Array"


def _typed_array_name(typecode: str, itemsize: int) -> str:
	bits = itemsize * 8
	if typecode in ("f", "d"):
		return f"Float{bits}Array"
	signed = typecode.islower()
	if bits == 64:
		return "BigInt64Array" if signed else "BigUint64Array"
	return f"{'Int' if signed else 'Uint'}{bits}Array"


def _build_typecode_table() -> dict[str, str]:
	table: dict[str, str] = {}
	# Smallest C type wins when two typecodes share a width (e.g. 'i' and 'l').
	for typecode in "bBhHiIlLqQfd":
		name = _typed_array_name(typecode, array.array(typecode).itemsize)
		table.setdefault(name, typecode)
	table["Uint8ClampedArray"] = "B"
	return table


TYPED_ARRAY_TYPECODES: dict[str, str] = _build_typecode_table()


def _typed_array_annotation(value: array.array[Any]) -> Annotation:
	return [TYPED_ARRAY, _typed_array_name(value.typecode, value.itemsize)]


def _typed_array_from_plain(value: Any, annotation: Annotation) -> array.array[Any]:
	if isinstance(annotation, (list, tuple)):
		name = annotation[1]
	else:
		name = _DEFAULT_TYPED_ARRAY
	typecode = TYPED_ARRAY_TYPECODES.get(name)
	if typecode is None:
		raise UnknownAnnotationError(f"Unknown typed array: {name!r}")
	if not isinstance(value, list):
		raise TypeError(f"typed-array payload must be an array, got {type(value)!r}")
	return array.array(typecode, value)


# =============================================================================
# Registry
# =============================================================================


DEFAULT_RULES: Sequence[Rule] = (
	Rule(
		kind="undefined",
		check=is_undefined,
		forward=lambda _v: None,
		inverse=lambda _v, _a: UNDEFINED,
	),
	Rule(
		kind="bigint",
		check=is_bigint,
		forward=str,
		inverse=_bigint_from_plain,
	),
	Rule(
		kind="Date",
		check=is_date,
		forward=_datetime_to_iso,
		inverse=_datetime_from_iso,
	),
	Rule(
		kind="Error",
		check=is_error,
		forward=_error_to_plain,
		inverse=_error_from_plain,
	),
	Rule(
		kind="regexp",
		check=is_regexp,
		forward=_regexp_to_plain,
		inverse=_regexp_from_plain,
	),
	Rule(
		kind="set",
		check=is_set,
		forward=list,
		inverse=_set_from_plain,
	),
	Rule(
		kind="map",
		check=is_map,
		forward=_map_to_plain,
		inverse=_map_from_plain,
	),
	Rule(
		kind="number",
		check=is_special_number,
		forward=_number_to_plain,
		inverse=_number_from_plain,
	),
	Rule(
		kind="URL",
		check=is_url,
		forward=str,
		inverse=_url_from_plain,
	),
	Rule(
		kind=TYPED_ARRAY,
		check=is_typed_array,
		forward=list,
		inverse=_typed_array_from_plain,
		annotate=_typed_array_annotation,
	),
)

DEFAULT_REGISTRY = Registry(DEFAULT_RULES)
