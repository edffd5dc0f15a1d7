"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass

from repo_browser.domain.exceptions import InvalidReferenceError

_CURSOR_RE = re.compile(r"^(?P<base>.+?)~(?P<depth>\d+)$")


@dataclass(frozen=True, slots=True)
class PaginationCursor:
    """Resumption point for a history walk: a base ref plus a skip depth.

    The string form is a revision spec understood by the object store, e.g.
    ``HEAD`` or ``main~200``.  Depths count ancestors of the base ref, so a
    cursor stays valid when new commits land on the branch tip.  If history
    is rewritten between page loads, following cursors can skip or repeat
    commits.
    """

    base: str
    depth: int = 0

    @classmethod
    def parse(cls, raw: str) -> PaginationCursor:
        """Split a revision spec into base ref and trailing ``~N`` depth."""
        raw = raw.strip()
        if not raw:
            raise InvalidReferenceError("Empty revision.")
        match = _CURSOR_RE.match(raw)
        if match:
            return cls(base=match["base"], depth=int(match["depth"]))
        return cls(base=raw)

    def advance(self, steps: int) -> PaginationCursor:
        """Return the cursor *steps* ancestors further down the same base."""
        return PaginationCursor(base=self.base, depth=self.depth + steps)

    def __str__(self) -> str:
        if self.depth:
            return f"{self.base}~{self.depth}"
        return self.base
