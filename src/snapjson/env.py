"""Codec configuration, read from environment variables.

- ``SNAPJSON_GUARD_DECODE``: set to ``0``/``false`` to skip the prototype
  pollution check on decoded paths. Enabled by default.
- ``SNAPJSON_UNSUPPORTED``: what to do with values the codec has no rule for.
  ``passthrough`` (default) copies them into the plain tree unchanged,
  ``drop`` replaces them with ``None`` and ``reject`` raises
  `UnsupportedValueError`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, cast, get_args

logger = logging.getLogger(__name__)

ENV_SNAPJSON_GUARD_DECODE = "SNAPJSON_GUARD_DECODE"
ENV_SNAPJSON_UNSUPPORTED = "SNAPJSON_UNSUPPORTED"

UnsupportedPolicy = Literal["passthrough", "drop", "reject"]
UNSUPPORTED_POLICIES: tuple[UnsupportedPolicy, ...] = get_args(UnsupportedPolicy)

_FALSY = {"0", "false", "False"}


@dataclass(slots=True, frozen=True)
class CodecConfig:
	guard_decode: bool = True
	unsupported: UnsupportedPolicy = "passthrough"

	def __post_init__(self) -> None:
		if self.unsupported not in UNSUPPORTED_POLICIES:
			raise ValueError(
				f"unsupported must be one of {UNSUPPORTED_POLICIES}, got {self.unsupported!r}"
			)

	@classmethod
	def from_env(cls, environ: Mapping[str, str] | None = None) -> CodecConfig:
		if environ is None:
			environ = os.environ
		return cls(
			guard_decode=guard_decode_enabled(environ),
			unsupported=unsupported_policy(environ),
		)


def guard_decode_enabled(environ: Mapping[str, str]) -> bool:
	value = environ.get(ENV_SNAPJSON_GUARD_DECODE)
	if value is None:
		return True
	return value not in _FALSY


def unsupported_policy(environ: Mapping[str, str]) -> UnsupportedPolicy:
	raw = environ.get(ENV_SNAPJSON_UNSUPPORTED, "").strip().lower()
	if not raw:
		return "passthrough"
	if raw not in UNSUPPORTED_POLICIES:
		logger.warning(
			"Ignoring %s=%r; expected one of %s",
			ENV_SNAPJSON_UNSUPPORTED,
			raw,
			", ".join(UNSUPPORTED_POLICIES),
		)
		return "passthrough"
	return cast(UnsupportedPolicy, raw)
