from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from ..core.constants import NO_REMARKS, NOTHING

MAX_REMARK_LENGTH = 300


@dataclass(frozen=True)
class ReportInput:
    """Free-text fields of the post-work report."""

    state_before: str = ""
    extra_works: str = ""
    deviations: str = ""
    insulation_resistance: str = ""
    coefficient_k: str = ""


def _clean(value: str, default: str = "") -> str:
    text = " ".join(str(value or "").split())[:MAX_REMARK_LENGTH]
    return text or default


class ReportService:
    def build_lines(self, report: ReportInput, operation_names: Sequence[str]) -> tuple[str, ...]:
        resistance = _clean(report.insulation_resistance)
        resistance_text = f"{resistance} MOhm" if resistance else ""
        k = _clean(report.coefficient_k).replace(",", ".")
        return (
            f"1. condition of the repair object before work: {_clean(report.state_before, NO_REMARKS)}",
            f"2. works performed within the planned scope: {', '.join(operation_names)}",
            f"3. works performed within the additional scope: {_clean(report.extra_works, NOTHING)}",
            f"4. test, measurement and inspection results: Riz= {resistance_text} K= {k}",
            f"5. deviations from the technology card and recommendations: {_clean(report.deviations, NOTHING)}",
        )

    def build_title(self, *, card_name: str, order: str = "", generated_at: datetime) -> str:
        name = f"{order} | {card_name}" if order else card_name
        return f"{name} | Generated: {generated_at:%d.%m.%Y}; {generated_at:%H:%M:%S}"
