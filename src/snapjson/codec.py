"""Public entry points.

``serialize``/``deserialize`` convert between a value graph and an
`Envelope`; ``stringify``/``parse`` do the same through compact JSON text.
The module-level functions use a default `Codec` configured from the
environment (see `snapjson.env`).
"""

from __future__ import annotations

import json
import logging
from functools import cache
from typing import Any

from snapjson.envelope import Envelope
from snapjson.env import CodecConfig
from snapjson.reconstruct import reconstruct
from snapjson.rules import DEFAULT_REGISTRY, Registry
from snapjson.walker import walk

logger = logging.getLogger(__name__)

__all__ = [
	"Codec",
	"default_codec",
	"serialize",
	"deserialize",
	"stringify",
	"parse",
]


class Codec:
	__slots__: tuple[str, ...] = ("config", "registry")

	config: CodecConfig
	registry: Registry

	def __init__(
		self,
		config: CodecConfig | None = None,
		registry: Registry | None = None,
	) -> None:
		self.config = config if config is not None else CodecConfig()
		self.registry = registry if registry is not None else DEFAULT_REGISTRY

	def serialize(self, value: Any) -> Envelope:
		result = walk(value, self.registry, unsupported=self.config.unsupported)
		envelope: Envelope = {"json": result.value}
		if result.annotations:
			envelope["meta"] = {"values": result.annotations}
		return envelope

	def deserialize(self, envelope: Envelope) -> Any:
		return reconstruct(envelope, self.registry, guard=self.config.guard_decode)

	def stringify(self, value: Any) -> str:
		"""Serialize to JSON text.

		Raises `TypeError` if a passed-through value is not JSON serializable.
		"""
		return json.dumps(self.serialize(value), separators=(",", ":"), allow_nan=False)

	def parse(self, text: str | bytes) -> Any:
		return self.deserialize(json.loads(text))


@cache
def default_codec() -> Codec:
	config = CodecConfig.from_env()
	logger.debug("Using default codec config %r", config)
	return Codec(config)


def serialize(value: Any) -> Envelope:
	return default_codec().serialize(value)


def deserialize(envelope: Envelope) -> Any:
	return default_codec().deserialize(envelope)


def stringify(value: Any) -> str:
	return default_codec().stringify(value)


def parse(text: str | bytes) -> Any:
	return default_codec().parse(text)
