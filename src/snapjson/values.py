"""In-memory value kinds that have no native Python counterpart."""

from __future__ import annotations

from typing import Any, final, override


@final
class Undefined:
	"""JS `undefined`, as distinct from `None` (JS `null`).

	Use the `UNDEFINED` singleton rather than instantiating this class.
	"""

	__slots__: tuple[str, ...] = ()
	_instance: Undefined | None = None

	def __new__(cls) -> Undefined:
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	@override
	def __repr__(self) -> str:
		return "UNDEFINED"

	def __bool__(self) -> bool:
		return False

	def __reduce__(self) -> str:
		return "UNDEFINED"


UNDEFINED = Undefined()


class RemoteError(Exception):
	"""An error object whose name doesn't match a Python builtin exception.

	Decoding `{"name": "RangeError", ...}` produces one of these with
	``name == "RangeError"``, so that re-encoding it yields the same name.
	"""

	name: str
	stack: str | None
	cause: Any

	def __init__(
		self,
		message: str = "",
		*,
		name: str = "Error",
		stack: str | None = None,
		cause: Any = None,
	) -> None:
		super().__init__(message)
		self.name = name
		self.stack = stack
		self.cause = cause

	@property
	def message(self) -> str:
		return str(self.args[0]) if self.args else ""

	@override
	def __repr__(self) -> str:
		return f"RemoteError({self.name}: {self.message!r})"


class OrderedMap(dict[Any, Any]):
	"""A key/value map that keeps its ``"map"`` tag whatever its key types.

	Plain dicts with only string keys encode as JSON objects. Wrap one in
	`OrderedMap` to encode it as an entry list instead, the way a JS ``Map``
	is encoded. Decoded ``"map"`` annotations always produce this type.
	"""

	__slots__: tuple[str, ...] = ()

	@override
	def __repr__(self) -> str:
		return f"OrderedMap({dict.__repr__(self)})"
