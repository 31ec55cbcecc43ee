"""Decoder: rebuild extended values from an envelope.

Annotation paths point into the *plain* tree, where e.g. a set is still a
list and an error is still a dict. A path is therefore only navigable while
its ancestors are untouched, so inverses are applied deepest path first:
children are rebuilt before the container that holds them. Entries at the
same depth keep their side-table order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from snapjson.envelope import Annotation, Envelope
from snapjson.errors import MalformedEnvelopeError, SnapjsonError
from snapjson.guard import check_key
from snapjson.paths import decode_path
from snapjson.rules import Registry, Rule

logger = logging.getLogger(__name__)


def reconstruct(envelope: Envelope, registry: Registry, *, guard: bool = True) -> Any:
	if not isinstance(envelope, Mapping) or "json" not in envelope:
		raise MalformedEnvelopeError("Envelope must be an object with a 'json' field")

	data = envelope["json"]
	meta = envelope.get("meta")
	if meta is None:
		return data
	if not isinstance(meta, Mapping):
		raise MalformedEnvelopeError(f"Envelope 'meta' must be an object, got {type(meta)!r}")
	values = meta.get("values")
	if not values:
		return data
	if not isinstance(values, Mapping):
		raise MalformedEnvelopeError(f"Envelope 'meta.values' must be an object, got {type(values)!r}")

	# Resolve every rule up front so an unknown tag fails before any work.
	plan: list[tuple[list[str], str, Rule, Annotation]] = []
	for raw_path, annotation in values.items():
		path = decode_path(raw_path)
		if guard:
			for index, key in enumerate(path):
				check_key(key, path[:index])
		plan.append((path, raw_path, registry.lookup(annotation), annotation))
	plan.sort(key=lambda entry: len(entry[0]), reverse=True)

	root = _copy_plain(data)
	for path, raw_path, rule, annotation in plan:
		if not path:
			root = _apply(rule, root, annotation, raw_path)
			continue
		parent = _resolve(root, path[:-1], raw_path)
		key = _container_key(parent, path[-1], raw_path)
		parent[key] = _apply(rule, parent[key], annotation, raw_path)

	logger.debug("Applied %d annotation(s)", len(plan))
	return root


def _copy_plain(value: Any) -> Any:
	"""Copy the list/dict skeleton of a plain tree; leaves are shared."""
	if isinstance(value, list):
		return [_copy_plain(item) for item in value]
	if isinstance(value, dict):
		return {key: _copy_plain(item) for key, item in value.items()}
	return value


def _container_key(container: Any, segment: str, raw_path: str) -> str | int:
	if isinstance(container, list):
		if not (segment.isascii() and segment.isdigit()):
			raise MalformedEnvelopeError(
				f"Path {raw_path!r}: segment {segment!r} is not a list index"
			)
		index = int(segment)
		if index >= len(container):
			raise MalformedEnvelopeError(
				f"Path {raw_path!r}: index {index} is out of range"
			)
		return index
	if isinstance(container, dict):
		if segment not in container:
			raise MalformedEnvelopeError(f"Path {raw_path!r}: missing key {segment!r}")
		return segment
	raise MalformedEnvelopeError(
		f"Path {raw_path!r}: cannot navigate into {type(container)!r}"
	)


def _resolve(root: Any, path: list[str], raw_path: str) -> Any:
	current = root
	for segment in path:
		current = current[_container_key(current, segment, raw_path)]
	return current


def _apply(rule: Rule, value: Any, annotation: Annotation, raw_path: str) -> Any:
	try:
		return rule.inverse(value, annotation)
	except SnapjsonError:
		raise
	except Exception as exc:
		raise MalformedEnvelopeError(
			f"Path {raw_path!r}: cannot rebuild {rule.kind} from {value!r}: {exc}"
		) from exc
