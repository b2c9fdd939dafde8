"""Outcome values returned by the registration ledger.

A ledger call either succeeded (``Ok``), was rejected with a known reason
(``Err``), or ended without confirmation from the store (``Unknown``). Callers
must not treat ``Unknown`` as success; they re-query the store instead.
"""

from dataclasses import dataclass

from campus_events.domain.errors import DomainError, UnknownOutcomeError


@dataclass(frozen=True)
class Ok:
    """Accepted. ``count`` is the event's registration count afterwards."""

    count: int

    def unwrap(self) -> int:
        return self.count


@dataclass(frozen=True)
class Err:
    error: DomainError

    def unwrap(self) -> int:
        raise self.error


@dataclass(frozen=True)
class Unknown:
    reason: str

    def unwrap(self) -> int:
        raise UnknownOutcomeError(self.reason)


RegistrationResult = Ok | Err | Unknown
