"""Encoder: turn a value graph into a plain tree plus annotations.

The walk is depth-first. At every node:

1. Primitives are returned unchanged.
2. A node that is already an ancestor on the current path (a cycle) becomes
   ``None``, without an annotation.
3. If a rule matches, its annotation is recorded at the node's path and the
   node is replaced by the rule's forward output.
4. Container-shaped results (lists, string-keyed mappings) are rebuilt with
   every child walked, so that e.g. the elements of a set are encoded too.
5. Anything else is an unsupported value, handled according to the
   configured policy.

The walk is recursive, so nesting is bounded by `sys.getrecursionlimit()`;
deeper graphs raise `NestingTooDeepError` (a `StructuralError`).

Shared sub-graphs that are not cycles are simply encoded once per reference.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any

from snapjson.envelope import Annotation, JsonValue
from snapjson.env import UnsupportedPolicy
from snapjson.errors import NestingTooDeepError, UnsupportedValueError
from snapjson.guard import check_key
from snapjson.paths import Path, encode_path
from snapjson.predicates import is_plain_list, is_plain_object, is_primitive
from snapjson.rules import Registry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalkResult:
	value: JsonValue
	annotations: dict[str, Annotation] = field(default_factory=dict)


def walk(
	data: Any,
	registry: Registry,
	*,
	unsupported: UnsupportedPolicy = "passthrough",
) -> WalkResult:
	annotations: dict[str, Annotation] = {}
	# id() of the original nodes between the root and the current node
	ancestors: set[int] = set()

	def process(value: Any, path: Path) -> JsonValue:
		if is_primitive(value):
			return value

		node_id = id(value)
		if node_id in ancestors:
			logger.debug("Truncating cycle at %r", encode_path(path))
			return None

		rule = registry.match(value)
		current = value
		if rule is not None:
			annotations[encode_path(path)] = rule.tag(value)
			current = rule.forward(value)
			if is_primitive(current):
				return current

		if is_plain_list(current):
			ancestors.add(node_id)
			try:
				return [process(item, (*path, index)) for index, item in enumerate(current)]
			finally:
				ancestors.discard(node_id)

		if is_plain_object(current):
			ancestors.add(node_id)
			try:
				result: dict[str, JsonValue] = {}
				for key, item in current.items():
					check_key(key, path)
					result[key] = process(item, (*path, key))
				return result
			finally:
				ancestors.discard(node_id)

		if rule is not None:
			return current
		return _unsupported(value, path, unsupported)

	try:
		result = process(data, ())
	except RecursionError as exc:
		raise NestingTooDeepError(
			f"Value nests deeper than the recursion limit ({sys.getrecursionlimit()})"
		) from exc
	return WalkResult(result, annotations)


def _unsupported(value: Any, path: Path, policy: UnsupportedPolicy) -> JsonValue:
	if policy == "reject":
		raise UnsupportedValueError(
			f"Unsupported value in serialization at {encode_path(path) or '<root>'}: {type(value)!r}"
		)
	if policy == "drop":
		logger.debug("Dropping unsupported %r at %r", type(value), encode_path(path))
		return None
	logger.debug("Passing through unsupported %r at %r", type(value), encode_path(path))
	return value
