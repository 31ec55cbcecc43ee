from __future__ import annotations

from collections.abc import Iterable

from snapjson.errors import PrototypePollutionError
from snapjson.paths import PathKey, encode_path

# Keys that rewire prototype linkage when a JS consumer assigns them on a
# plain object.
FORBIDDEN_KEYS: frozenset[str] = frozenset({"__proto__", "constructor", "prototype"})


def check_key(key: PathKey, path: Iterable[PathKey] = ()) -> None:
	if isinstance(key, str) and key in FORBIDDEN_KEYS:
		location = encode_path(path) or "<root>"
		raise PrototypePollutionError(
			f"Detected property {key!r} at {location}. This is a prototype pollution risk, please remove it from your object."
		)
