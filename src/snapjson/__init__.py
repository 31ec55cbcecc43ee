from snapjson.codec import (
	Codec,
	default_codec,
	deserialize,
	parse,
	serialize,
	stringify,
)
from snapjson.env import CodecConfig
from snapjson.envelope import Annotation, Envelope, Meta
from snapjson.errors import (
	MalformedEnvelopeError,
	NestingTooDeepError,
	PathSyntaxError,
	PrototypePollutionError,
	SnapjsonError,
	StructuralError,
	UnknownAnnotationError,
	UnsupportedValueError,
)
from snapjson.paths import decode_path, encode_path
from snapjson.rules import DEFAULT_REGISTRY, Registry, Rule
from snapjson.values import UNDEFINED, OrderedMap, RemoteError, Undefined

__all__ = [
	"Annotation",
	"Codec",
	"CodecConfig",
	"DEFAULT_REGISTRY",
	"Envelope",
	"MalformedEnvelopeError",
	"Meta",
	"NestingTooDeepError",
	"OrderedMap",
	"PathSyntaxError",
	"PrototypePollutionError",
	"Registry",
	"RemoteError",
	"Rule",
	"SnapjsonError",
	"StructuralError",
	"UNDEFINED",
	"Undefined",
	"UnknownAnnotationError",
	"UnsupportedValueError",
	"decode_path",
	"default_codec",
	"deserialize",
	"encode_path",
	"parse",
	"serialize",
	"stringify",
]
