"""Strict UTF-8 conversion that refuses to mangle ill-formed text."""

from __future__ import annotations

from freikino.errors import (
    E_INVALIDARG,
    ERROR_NO_UNICODE_TRANSLATION,
    HResultError,
    hresult_from_win32,
)

_INT_MAX = 2**31 - 1


def utf8_to_wide(data: bytes) -> str:
    """Decode UTF-8 bytes, raising :class:`HResultError` on ill-formed input."""
    if not data:
        return ""
    if len(data) > _INT_MAX:
        raise HResultError(E_INVALIDARG)
    try:
        return bytes(data).decode("utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise HResultError(hresult_from_win32(ERROR_NO_UNICODE_TRANSLATION)) from exc


def wide_to_utf8(text: str) -> bytes:
    """Encode text as UTF-8, raising :class:`HResultError` on lone surrogates."""
    if not text:
        return b""
    if len(text) > _INT_MAX:
        raise HResultError(E_INVALIDARG)
    try:
        return text.encode("utf-8", errors="strict")
    except UnicodeEncodeError as exc:
        raise HResultError(hresult_from_win32(ERROR_NO_UNICODE_TRANSLATION)) from exc