"""HRESULT-carrying errors raised where a platform call reports failure."""

from __future__ import annotations

import inspect
from typing import Optional, TypeVar

T = TypeVar("T")

S_OK = 0
E_NOTIMPL = 0x80004001
E_POINTER = 0x80004003
E_UNEXPECTED = 0x8000FFFF
E_INVALIDARG = 0x80070057

ERROR_INVALID_FUNCTION = 1
ERROR_NO_UNICODE_TRANSLATION = 1113

_FACILITY_WIN32 = 7
_SEVERITY_BIT = 0x80000000


def _u32(value: int) -> int:
    return value & 0xFFFFFFFF


def _failed(hr: int) -> bool:
    return bool(_u32(hr) & _SEVERITY_BIT)


def _caller_location(skip: int) -> str:
    """Describe the frame ``skip`` levels above the caller of this helper."""
    frame = inspect.currentframe()
    try:
        for _ in range(skip + 1):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return "<unknown>"
        code = frame.f_code
        return f"{code.co_filename}:{frame.f_lineno} in {code.co_name}"
    finally:
        del frame


class HResultError(Exception):
    """An HRESULT failure code together with where it was raised."""

    def __init__(self, hr: int, location: Optional[str] = None) -> None:
        if location is None:
            location = _caller_location(1)
        self._code = _u32(hr)
        self._where = location
        super().__init__(f"HRESULT 0x{self._code:08X} at {location}")

    @property
    def code(self) -> int:
        """The failure code as an unsigned 32-bit value."""
        return self._code

    @property
    def where(self) -> str:
        """``file:line in function`` of the call site that failed."""
        return self._where


def hresult_from_win32(err: int) -> int:
    """Map a Win32 error number into the HRESULT space."""
    value = _u32(err)
    signed = value - 0x100000000 if value & _SEVERITY_BIT else value
    if signed <= 0:
        return value
    return (value & 0xFFFF) | (_FACILITY_WIN32 << 16) | _SEVERITY_BIT


def _last_error_hr(err: int) -> int:
    return hresult_from_win32(err if err != 0 else ERROR_INVALID_FUNCTION)


def throw_hresult(hr: int) -> None:
    """Raise :class:`HResultError` for ``hr`` unconditionally."""
    raise HResultError(hr, _caller_location(1))


def throw_last_error(err: int = 0) -> None:
    """Raise for a Win32 error number; zero maps to ERROR_INVALID_FUNCTION."""
    raise HResultError(_last_error_hr(err), _caller_location(1))


def check_hr(hr: int) -> None:
    """Raise if ``hr`` has the failure bit set."""
    if _failed(hr):
        raise HResultError(hr, _caller_location(1))


def check_bool(ok: object, err: int = 0) -> None:
    """Raise a last-error failure when ``ok`` is false."""
    if not ok:
        raise HResultError(_last_error_hr(err), _caller_location(1))


def check_ptr(value: Optional[T], err: int = 0) -> T:
    """Return ``value``, raising a last-error failure when it is None."""
    if value is None:
        raise HResultError(_last_error_hr(err), _caller_location(1))
    return value