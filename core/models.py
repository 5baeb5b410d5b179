# dataclasses for dictionary entries, rules, products and findings
from __future__ import annotations

from dataclasses import dataclass, field

from core.enums import FindingType, Language, ProductCategory, RuleType, Severity, Verdict


@dataclass(frozen=True)
class LocalizedText:
    en: str = ""
    ko: str = ""

    def get(self, lang: Language | str) -> str:
        """Text in the requested language, falling back to the other one when empty."""
        if str(lang) == Language.ko:
            return self.ko or self.en
        return self.en or self.ko


@dataclass(frozen=True)
class Ingredient:
    id: str
    inci_name: str
    ko_name: str
    aliases: tuple[str, ...]
    classes: tuple[str, ...] = ()
    is_active: bool = False  # UI emphasis only, not used by analysis
    description: LocalizedText | None = None


@dataclass(frozen=True)
class Rule:
    id: str
    level: int  # 1=conflict, 2=caution, 3=synergy
    type: RuleType
    a: frozenset[str]
    b: frozenset[str]
    title: LocalizedText
    reason: LocalizedText
    reason_detail: LocalizedText
    fix: LocalizedText
    fix_detail: LocalizedText
    severity_weight: float = 0.0


@dataclass(frozen=True)
class Product:
    id: str
    ingredients: tuple[str, ...] = ()  # matched ingredient ids, de-duplicated
    name: str = ""
    brand: str = ""
    category: ProductCategory = ProductCategory.other
    raw_text: str = ""
    created_at: str = ""


@dataclass(frozen=True)
class Finding:
    rule_id: str
    level: int
    severity: Severity
    type: FindingType
    ingredient_a: str  # member of rule.a
    ingredient_b: str  # member of rule.b
    product_a: str
    product_b: str
    rule: Rule


@dataclass
class FindingSummary:
    red: int = 0
    yellow: int = 0
    green: int = 0
    verdict: Verdict = Verdict.safe

    @property
    def total(self) -> int:
        return self.red + self.yellow + self.green


@dataclass
class PairReport:
    product_a: str
    product_b: str
    worst_level: int
    findings: list[Finding] = field(default_factory=list)


@dataclass
class AnalysisResult:
    id: str
    product_ids: list[str]
    findings: list[Finding] = field(default_factory=list)
    created_at: str = ""
