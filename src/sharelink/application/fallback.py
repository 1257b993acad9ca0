# src/sharelink/application/fallback.py
"""
Fallback Driver - Ordered "First Success Wins" Iteration

Both domain resolution and file distribution walk an ordered list of
independent attempts and stop at the first one that succeeds. This module
holds that iteration once. An attempt that raises is logged and counted as a
failure; it never stops the attempts after it.

Files that USE this module:
- sharelink.application.domain_resolver (strategy iteration)
- sharelink.application.distribution (own route / provider iteration)
- tests.test_fallback (unit tests)

Files that this module USES:
- None (pure control flow)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Protocol, Sequence, Tuple, TypeVar

log = logging.getLogger(__name__)

S = TypeVar("S", contravariant=True)
R = TypeVar("R", covariant=True)
T = TypeVar("T")


class Attempt(Protocol[S, R]):
    """One alternative in a fallback chain."""

    name: str

    def attempt(self, subject: S) -> Optional[R]:
        ...


@dataclass
class FallbackOutcome(Generic[T]):
    """
    Result of running a fallback chain.

    Attributes:
        result: The winning result, or None if every attempt failed
        winner: Name of the attempt that produced the result
        failures: (attempt name, reason) for every attempt that did not win
    """
    result: Optional[T] = None
    winner: Optional[str] = None
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result is not None

    def describe_failures(self) -> str:
        return "; ".join(f"{name}: {reason}" for name, reason in self.failures)


def first_success(
    attempts: Sequence[Attempt],
    subject,
    is_success: Callable[[object], bool] = lambda r: r is not None,
    describe: Callable[[object], str] = lambda r: "no result",
    label: str = "fallback",
) -> FallbackOutcome:
    """
    Run attempts in order until one succeeds.

    Args:
        attempts: Ordered alternatives
        subject: Input handed to every attempt
        is_success: Decides whether a returned value counts as success
        describe: Turns an unsuccessful returned value into a failure reason
        label: Chain name used in log messages

    Returns:
        FallbackOutcome with the first successful result, or only failures
    """
    outcome: FallbackOutcome = FallbackOutcome()
    for item in attempts:
        try:
            result = item.attempt(subject)
        except Exception as e:
            log.warning("[%s] %s raised %s: %s", label, item.name, type(e).__name__, e)
            outcome.failures.append((item.name, f"{type(e).__name__}: {e}"))
            continue

        if result is not None and is_success(result):
            log.info("[%s] %s succeeded", label, item.name)
            outcome.result = result
            outcome.winner = item.name
            return outcome

        reason = describe(result) if result is not None else "no result"
        log.info("[%s] %s failed: %s", label, item.name, reason)
        outcome.failures.append((item.name, reason))

    log.warning("[%s] all %d attempts failed", label, len(attempts))
    return outcome
