from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Set


@dataclass
class WarningState:
    """
    "Already warned" flags owned by whoever drives the engines (a session,
    a host module, a test). Pass one instance to several engines to share
    the flags, or let each engine create its own.
    """
    _seen: Set[str] = field(default_factory=set)

    def should_warn(self, key: str) -> bool:
        """True the first time ``key`` is seen; marks it as warned."""
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def has_warned(self, key: str) -> bool:
        return key in self._seen

    def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            self._seen.clear()
        else:
            self._seen.discard(key)
