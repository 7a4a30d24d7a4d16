from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PkceSession:
    state: str
    code_verifier: str


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str | None = None
