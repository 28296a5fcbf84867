from enum import Enum


class Severity(str, Enum):
    NONE = 'none'
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    Severity.NONE: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}

# Analysis states that mark a vulnerability as no longer actionable
RESOLVED_STATES = frozenset({
    'false_positive',
    'not_affected',
    'resolved',
    'resolved_with_pedigree',
    'resolved_with_patchable_fix',
})


def severity_rank(value: str | None) -> int:
    """Rank a severity string, -1 for anything unrecognized."""
    if not value:
        return -1
    try:
        return Severity(value.strip().lower()).rank
    except ValueError:
        return -1

