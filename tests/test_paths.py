import pytest
from snapjson.errors import PathSyntaxError
from snapjson.paths import decode_path, encode_path


def test_root_is_empty_string():
	assert encode_path([]) == ""
	assert decode_path("") == []


def test_simple_paths():
	assert encode_path(["a", 0, "b"]) == "a.0.b"
	assert decode_path("a.0.b") == ["a", "0", "b"]


@pytest.mark.parametrize(
	("segments", "encoded"),
	[
		(["a.b"], "a\\.b"),
		(["a\\b"], "a\\\\b"),
		(["a\\", "b"], "a\\\\.b"),
		(["a\\.b"], "a\\\\\\.b"),
		([""], "\\0"),
		(["x", ""], "x.\\0"),
		(["", ""], "\\0.\\0"),
		(["\\0"], "\\\\0"),
		(["..", "."], "\\.\\..\\."),
	],
)
def test_escaping(segments, encoded):
	assert encode_path(segments) == encoded
	assert decode_path(encoded) == segments


def test_decode_returns_string_segments():
	assert decode_path(encode_path(["items", 3, 12])) == ["items", "3", "12"]


def test_distinct_paths_encode_differently():
	candidates = [
		[],
		[""],
		["", ""],
		["a.b"],
		["a", "b"],
		["a\\", "b"],
		["a\\.b"],
		["a\\\\", "b"],
	]
	encoded = [encode_path(path) for path in candidates]
	assert len(set(encoded)) == len(candidates)


def test_bare_empty_segments_are_accepted():
	assert decode_path("a.") == ["a", ""]
	assert decode_path(".a") == ["", "a"]


@pytest.mark.parametrize("text", ["a\\", "a\\x", "a\\0b", "\\0\\0", "b\\0"])
def test_malformed_paths(text):
	with pytest.raises(PathSyntaxError):
		decode_path(text)
