from __future__ import annotations

import uuid
from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime, timezone

from core.enums import Severity, Verdict
from core.models import AnalysisResult, Finding, FindingSummary, PairReport, Product


def summarize_findings(findings: Sequence[Finding]) -> FindingSummary:
    """Count findings per severity; any red is danger, else any yellow is a warning."""
    summary = FindingSummary()
    for f in findings:
        if f.severity == Severity.red:
            summary.red += 1
        elif f.severity == Severity.yellow:
            summary.yellow += 1
        else:
            summary.green += 1

    if summary.red:
        summary.verdict = Verdict.danger
    elif summary.yellow:
        summary.verdict = Verdict.warning
    else:
        summary.verdict = Verdict.safe
    return summary


def build_pair_reports(findings: Sequence[Finding]) -> list[PairReport]:
    """
    Group findings by the product pair they were found on.

    Pairs with the most severe finding come first; ties keep the order in
    which the pair first appears. Findings inside a pair keep their order.
    """
    grouped: dict[tuple[str, str], list[Finding]] = defaultdict(list)
    first_seen: dict[tuple[str, str], int] = {}

    for idx, f in enumerate(findings):
        key = (f.product_a, f.product_b)
        grouped[key].append(f)
        first_seen.setdefault(key, idx)

    reports = [
        PairReport(
            product_a=pa,
            product_b=pb,
            worst_level=min(f.level for f in pair_findings),
            findings=list(pair_findings),
        )
        for (pa, pb), pair_findings in grouped.items()
    ]
    reports.sort(key=lambda r: (r.worst_level, first_seen[(r.product_a, r.product_b)]))
    return reports


def build_analysis_result(
    products: Sequence[Product],
    findings: Sequence[Finding],
    *,
    result_id: str | None = None,
    created_at: str | None = None,
) -> AnalysisResult:
    """History record for one analysis run."""
    return AnalysisResult(
        id=result_id or uuid.uuid4().hex,
        product_ids=[p.id for p in products],
        findings=list(findings),
        created_at=created_at or datetime.now(timezone.utc).isoformat(),
    )
