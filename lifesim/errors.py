"""
Exceptions raised by the yearly tick and the world mutation helpers.

Three failure kinds exist and the caller is expected to treat them differently:

- ValidationError: the request or the stored world is malformed (missing world,
  dangling ids, ineligible player choice). Raised before anything is mutated.
- ConsistencyViolation: an invariant of the world model was broken by the tick
  itself (two active terms for one office, a double-filled role). This is a bug,
  not a transient condition, and must not be retried.
- StorageFailure: the persistence backend could not apply the commit. Nothing
  was written; the caller may retry the whole tick.

Expected no-op outcomes (no school for a child, no company to join, no election
candidates) are NOT errors and never raise.
"""

from typing import Iterable, Optional


class LifesimError(Exception):
    """Base class for all lifesim errors."""

    def __init__(self, message: str, *, world_id: Optional[int] = None) -> None:
        self.world_id = world_id
        super().__init__(message)


class ValidationError(LifesimError):
    """Raised when a world or entity reference is missing or malformed.

    Contains the list of problems found so the caller can report all of them
    at once instead of fixing one dangling id per run.
    """

    def __init__(
        self,
        message: str,
        *,
        world_id: Optional[int] = None,
        problems: Optional[Iterable[str]] = None,
    ) -> None:
        self.problems = list(problems or [])
        lines = [message]
        for problem in self.problems:
            lines.append(f"  - {problem}")
        super().__init__("\n".join(lines), world_id=world_id)


class ConsistencyViolation(LifesimError):
    """Raised when the tick produced a world that breaks a model invariant."""

    def __init__(
        self,
        *,
        world_id: Optional[int],
        year: int,
        violations: Iterable[str],
    ) -> None:
        self.year = year
        self.violations = list(violations)
        message_lines = [
            f"Consistency violation in world {world_id} for year {year}.",
            "Violations:",
        ]
        for violation in self.violations:
            message_lines.append(f"  - {violation}")
        message_lines.append(
            "\nThe tick was aborted and nothing was committed. This indicates a bug in "
            "the life-cycle rules; retrying will not help."
        )
        super().__init__("\n".join(message_lines), world_id=world_id)


class StorageFailure(LifesimError):
    """Raised when the persistence boundary could not commit a world."""

    def __init__(
        self,
        *,
        world_id: Optional[int],
        reason: str,
        underlying: Optional[BaseException] = None,
    ) -> None:
        self.reason = reason
        self.underlying = underlying
        message = (
            f"Storage failure for world {world_id}: {reason}\n\n"
            "The world was left unchanged. Retry the whole tick once the backend "
            "is reachable again."
        )
        super().__init__(message, world_id=world_id)
