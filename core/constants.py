from __future__ import annotations

from typing import Dict

from core.enums import FindingType, Severity

# Rule levels: 1 is the strongest (conflict), 3 the most benign (synergy)
LEVEL_CONFLICT = 1
LEVEL_CAUTION = 2
LEVEL_SYNERGY = 3

RULE_LEVELS = (LEVEL_CONFLICT, LEVEL_CAUTION, LEVEL_SYNERGY)

LEVEL_TO_SEVERITY: Dict[int, Severity] = {
    LEVEL_CONFLICT: Severity.red,
    LEVEL_CAUTION: Severity.yellow,
    LEVEL_SYNERGY: Severity.green,
}

LEVEL_TO_TYPE: Dict[int, FindingType] = {
    LEVEL_CONFLICT: FindingType.conflict,
    LEVEL_CAUTION: FindingType.caution,
    LEVEL_SYNERGY: FindingType.synergy,
}


def severity_for_level(level: int) -> Severity:
    return LEVEL_TO_SEVERITY[level]


def type_for_level(level: int) -> FindingType:
    return LEVEL_TO_TYPE[level]


_SEVERITY_ALIASES: Dict[str, Severity] = {
    # red
    "red": Severity.red,
    "1": Severity.red,
    "conflict": Severity.red,
    "conflicts": Severity.red,
    "danger": Severity.red,
    "충돌": Severity.red,

    # yellow
    "yellow": Severity.yellow,
    "2": Severity.yellow,
    "caution": Severity.yellow,
    "warning": Severity.yellow,
    "주의": Severity.yellow,

    # green
    "green": Severity.green,
    "3": Severity.green,
    "synergy": Severity.green,
    "synergies": Severity.green,
    "궁합": Severity.green,
}


def normalize_severity(raw: str | None) -> Severity | None:
    if raw is None:
        return None
    s = str(raw).strip()
    if not s:
        return None
    return _SEVERITY_ALIASES.get(s.lower())
