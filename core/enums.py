# severity bins, finding types, rule types, languages

from __future__ import annotations

from enum import StrEnum


class Severity(StrEnum):
    red = "red"
    yellow = "yellow"
    green = "green"


class FindingType(StrEnum):
    conflict = "conflict"
    caution = "caution"
    synergy = "synergy"


class RuleType(StrEnum):
    mutual = "mutual"
    ordered = "ordered"


class Language(StrEnum):
    ko = "ko"
    en = "en"


class ProductCategory(StrEnum):
    toner = "toner"
    serum = "serum"
    cream = "cream"
    cleanser = "cleanser"
    sunscreen = "sunscreen"
    mask = "mask"
    other = "other"


class Verdict(StrEnum):
    danger = "danger"
    warning = "warning"
    safe = "safe"
