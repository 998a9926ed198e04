"""Result type shared by the smoke tests and the database verification."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single smoke or verification check.

    Attributes:
        name: Short human-readable name of what was checked
        ok: Whether the check passed
        detail: Explanation, shown next to the status
    """

    name: str
    ok: bool
    detail: str = ""


def all_passed(results: list[CheckResult]) -> bool:
    return bool(results) and all(r.ok for r in results)
