from __future__ import annotations


class SnapjsonError(Exception):
	"""Base class for every error raised by the codec."""


class StructuralError(SnapjsonError):
	"""The input graph cannot be encoded safely."""


class PrototypePollutionError(StructuralError):
	pass


class NestingTooDeepError(StructuralError):
	"""The graph nests deeper than the interpreter recursion limit allows."""


class UnknownAnnotationError(SnapjsonError):
	"""An envelope carries a tag that no registered rule understands.

	This usually means the encoder and decoder disagree on their rule sets.
	"""


class MalformedEnvelopeError(SnapjsonError, ValueError):
	pass


class PathSyntaxError(SnapjsonError, ValueError):
	pass


class UnsupportedValueError(SnapjsonError, TypeError):
	pass
