"""Invariant markers."""

from __future__ import annotations

from typing import NoReturn

from sumgen.exceptions import NeverThrown


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    The env payload is carried on the raised exception for diagnostics only.
    """
    if env:
        details = ", ".join(f"{key}={env[key]!r}" for key in sorted(env))
        raise NeverThrown(f"{reason or 'never() reached'} ({details})", env=env)
    raise NeverThrown(reason or "never() reached", env=env)

