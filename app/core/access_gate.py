# app/core/access_gate.py
from __future__ import annotations

"""
Oniix Admin — Access Gate policy
================================

Decides, for every inbound request, whether it is blocked, redirected, or
allowed through. The decision is a pure function of the request path and
whether a session cookie is present; the cookie value itself is never
inspected here (token validation belongs to the auth dependencies).

Rule order (first match wins)
-----------------------------
1. Blocked prefix           → BLOCK (logged as a warning)
2. Login page               → REDIRECT_HOME with a session, else CONTINUE
3. Public prefix or any "." → CONTINUE
4. Everything else          → REDIRECT_LOGIN without a session, else CONTINUE

The "." rule is a plain substring test anywhere in the path. It lets static
files like `app.js` through, and it also lets through any dotted segment
such as `/dashboard/v1.2/report`. See DESIGN.md before changing it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from loguru import logger


class GateDecision(str, Enum):
    BLOCK = "block"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_HOME = "redirect_home"
    CONTINUE = "continue"


class PathClass(str, Enum):
    BLOCKED = "blocked"
    LOGIN = "login"
    PUBLIC = "public"
    PROTECTED = "protected"


@dataclass(frozen=True)
class AccessPolicy:
    """Immutable gate configuration, built once at startup."""

    blocked_prefixes: Tuple[str, ...] = ()
    public_prefixes: Tuple[str, ...] = ()
    login_path: str = "/login"
    home_path: str = "/"
    cookie_name: str = "oniix-access-token"
    static_dot_heuristic: bool = True
    blocked_message: str = "Service indisponible."

    @classmethod
    def build(
        cls,
        *,
        blocked_prefixes: Iterable[str] = (),
        public_prefixes: Iterable[str] = (),
        **kwargs,
    ) -> "AccessPolicy":
        """Freeze prefix iterables into tuples, dropping blank entries."""
        return cls(
            blocked_prefixes=tuple(p for p in blocked_prefixes if p),
            public_prefixes=tuple(p for p in public_prefixes if p),
            **kwargs,
        )

    @classmethod
    def from_settings(cls, settings) -> "AccessPolicy":
        return cls.build(
            blocked_prefixes=settings.BLOCKED_PATH_PREFIXES,
            public_prefixes=settings.PUBLIC_PATH_PREFIXES,
            login_path=settings.LOGIN_PATH,
            home_path=settings.HOME_PATH,
            cookie_name=settings.ACCESS_TOKEN_COOKIE_NAME,
            static_dot_heuristic=settings.STATIC_DOT_HEURISTIC,
            blocked_message=settings.BLOCKED_MESSAGE,
        )

    # ── Rule predicates ──────────────────────────────────────
    def is_blocked(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.blocked_prefixes)

    def is_public(self, path: str) -> bool:
        if any(path.startswith(p) for p in self.public_prefixes):
            return True
        return self.static_dot_heuristic and "." in path


def classify_path(path: str, policy: AccessPolicy) -> PathClass:
    """Classify `path` into exactly one class; blocked wins over everything."""
    if policy.is_blocked(path):
        return PathClass.BLOCKED
    if path == policy.login_path:
        return PathClass.LOGIN
    if policy.is_public(path):
        return PathClass.PUBLIC
    return PathClass.PROTECTED


def decide(path: str, has_credential: bool, policy: Optional[AccessPolicy] = None) -> GateDecision:
    """Return the gate decision for a request.

    Args:
        path: Request path as received (case-sensitive).
        has_credential: True when the session cookie is present and non-empty.
        policy: Gate configuration; defaults to the one built from settings.

    Returns:
        GateDecision: one of BLOCK, REDIRECT_LOGIN, REDIRECT_HOME, CONTINUE.
    """
    policy = policy or default_policy()
    kind = classify_path(path, policy)

    if kind is PathClass.BLOCKED:
        logger.bind(path=path).warning("Blocked request to disabled endpoint")
        return GateDecision.BLOCK
    if kind is PathClass.LOGIN:
        return GateDecision.REDIRECT_HOME if has_credential else GateDecision.CONTINUE
    if kind is PathClass.PUBLIC:
        return GateDecision.CONTINUE
    return GateDecision.CONTINUE if has_credential else GateDecision.REDIRECT_LOGIN


_default_policy: Optional[AccessPolicy] = None


def default_policy() -> AccessPolicy:
    """Policy built from the process settings on first use."""
    global _default_policy
    if _default_policy is None:
        from app.core.config import settings

        _default_policy = AccessPolicy.from_settings(settings)
    return _default_policy


__all__ = [
    "GateDecision",
    "PathClass",
    "AccessPolicy",
    "classify_path",
    "decide",
    "default_policy",
]
