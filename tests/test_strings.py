import pytest

from freikino.errors import ERROR_NO_UNICODE_TRANSLATION, HResultError, hresult_from_win32
from freikino.strings import utf8_to_wide, wide_to_utf8


@pytest.mark.parametrize("text", ["plain.mkv", "héllo ✓", "映画 🎬", "C:\\Videos\\a b.mp4"])
def test_round_trip(text):
    assert utf8_to_wide(wide_to_utf8(text)) == text


def test_empty_inputs():
    assert utf8_to_wide(b"") == ""
    assert wide_to_utf8("") == b""


def test_known_encoding():
    assert wide_to_utf8("é") == b"\xc3\xa9"


@pytest.mark.parametrize("data", [b"\xff", b"abc\xc3", b"\xc0\xaf", b"\xed\xa0\x80"])
def test_invalid_utf8_rejected(data):
    with pytest.raises(HResultError) as info:
        utf8_to_wide(data)
    assert info.value.code == hresult_from_win32(ERROR_NO_UNICODE_TRANSLATION)


def test_lone_surrogate_rejected():
    with pytest.raises(HResultError) as info:
        wide_to_utf8("a\ud800b")
    assert info.value.code == hresult_from_win32(ERROR_NO_UNICODE_TRANSLATION)


def test_decode_accepts_bytearray():
    assert utf8_to_wide(bytearray(wide_to_utf8("ok"))) == "ok"