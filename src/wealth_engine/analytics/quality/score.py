"""
Portfolio Quality Score
=======================
Combines the four independent sub-scores into an overall score, a letter
grade and a worst-first list of recommendations.

WORKFLOW:
1. diversification / balance / resilience / risk sub-scores (0-100 each)
2. overall = weighted average (QUALITY_WEIGHTS, sums to 1)
3. grade from GRADE_CUTOFFS
4. one recommendation per sub-score below HEALTHY_SCORE, ordered by
   ascending sub-score; ties keep AREA_ORDER
"""

from typing import Dict, List, Optional, Sequence, Tuple

from wealth_engine.analytics.quality.balance import balance_score
from wealth_engine.analytics.quality.diversification import diversification_score
from wealth_engine.analytics.quality.resilience import resilience_score
from wealth_engine.analytics.quality.risk import risk_penalty, risk_score
from wealth_engine.config.thresholds import (
    AREA_ORDER,
    FAILING_GRADE,
    GRADE_CUTOFFS,
    HEALTHY_SCORE,
    HHI_AXIS_WEIGHTS,
    LARGEST_POSITION_WARNING,
    QUALITY_WEIGHTS,
    RECOMMENDATION_PRIORITY,
)
from wealth_engine.models.portfolio import (
    Asset,
    BalanceReport,
    DiversificationReport,
    DriftReport,
    Priority,
    QualityScore,
    Recommendation,
    ResilienceReport,
    RiskReport,
    Settings,
)
from wealth_engine.utils.logger import get_logger

logger = get_logger(__name__)


# =========================
# GRADE / PRIORITY
# =========================

def letter_grade(score: float) -> str:
    for cutoff, grade in GRADE_CUTOFFS:
        if score >= cutoff:
            return grade
    return FAILING_GRADE


def recommendation_priority(score: float) -> Priority:
    if score < RECOMMENDATION_PRIORITY['high']:
        return Priority.HIGH
    if score < RECOMMENDATION_PRIORITY['medium']:
        return Priority.MEDIUM
    return Priority.LOW


# =========================
# WEAKEST FACTOR PER AREA
# =========================

_AXIS_SUGGESTIONS = {
    'individual': "Spread capital over more holdings",
    'asset_class': "Add exposure to under-represented asset classes",
    'currency': "Add holdings in other currencies",
    'region': "Broaden geographic exposure",
    'sector': "Diversify equity holdings across sectors",
}


def _diversification_factor(report: DiversificationReport) -> Tuple[str, str]:
    if report.largest_position is None:
        return 'holdings', "Add investible assets"
    largest = report.largest_position
    if largest.percentage > LARGEST_POSITION_WARNING:
        return 'largest_position', f"Reduce {largest.name} ({largest.percentage:.1f}% of the portfolio)"
    contributions = {
        'individual': report.individual_hhi * HHI_AXIS_WEIGHTS['individual'],
        'asset_class': report.asset_class_hhi * HHI_AXIS_WEIGHTS['asset_class'],
        'currency': report.currency_hhi * HHI_AXIS_WEIGHTS['currency'],
        'region': report.region_hhi * HHI_AXIS_WEIGHTS['region'],
        'sector': report.sector_hhi * HHI_AXIS_WEIGHTS['sector'],
    }
    # max() keeps the first axis on ties, dict order is fixed
    axis = max(contributions, key=contributions.get)
    return axis, _AXIS_SUGGESTIONS[axis]


def _balance_factor(report: BalanceReport) -> Tuple[str, str]:
    if not report.drifts:
        return 'drift', "Add investible assets"
    worst = max(report.drifts, key=lambda d: abs(d.drift))
    if worst.drift > 0:
        return worst.asset_class, (
            f"Reduce {worst.asset_class} ({worst.current_pct:.1f}% vs {worst.target_pct:.1f}% target)"
        )
    return worst.asset_class, (
        f"Increase {worst.asset_class} ({worst.current_pct:.1f}% vs {worst.target_pct:.1f}% target)"
    )


def _resilience_factor(report: ResilienceReport) -> Tuple[str, str]:
    components = [
        ('emergency_fund', report.emergency_score,
         f"Build an emergency fund of 3-6 months of expenses "
         f"(currently {report.emergency_fund_months:.1f} months)"),
        ('liquidity', report.liquidity_score,
         f"Hold more cash or money-market funds ({report.liquidity_ratio * 100:.1f}% liquid)"),
        ('defensive', report.defensive_score,
         f"Increase bonds and cash ({report.defensive_ratio * 100:.1f}% defensive)"),
    ]
    factor, _, suggestion = min(components, key=lambda c: c[1])
    return factor, suggestion


def _risk_factor(report: RiskReport) -> Tuple[str, str]:
    if not report.risks:
        return 'concentration', "Add investible assets"
    worst = max(report.risks, key=risk_penalty)
    return worst.name, (
        f"Reduce {worst.type.value.lower()} exposure to {worst.name} "
        f"({worst.percentage:.1f}% vs {worst.threshold:.1f}% limit)"
    )


def build_recommendations(diversification: DiversificationReport, balance: BalanceReport,
                          resilience: ResilienceReport, risk: RiskReport) -> List[Recommendation]:
    scored = [
        ('diversification', diversification.score, _diversification_factor(diversification)),
        ('balance', balance.score, _balance_factor(balance)),
        ('resilience', resilience.score, _resilience_factor(resilience)),
        ('risk', risk.score, _risk_factor(risk)),
    ]
    scored.sort(key=lambda item: (item[1], AREA_ORDER.index(item[0])))

    return [
        Recommendation(area=area, factor=factor, suggestion=suggestion,
                       priority=recommendation_priority(score))
        for area, score, (factor, suggestion) in scored
        if score < HEALTHY_SCORE
    ]


# =========================
# OVERALL
# =========================

def overall_score(sub_scores: Dict[str, float]) -> float:
    total = 0.0
    for area in AREA_ORDER:
        total += sub_scores[area] * QUALITY_WEIGHTS[area]
    return total


def calculate_quality_score(assets: Sequence[Asset], settings: Settings,
                            drift: Optional[DriftReport] = None) -> QualityScore:
    """
    Full quality assessment. Sub-scores are independent of each other and
    never rounded here; rounding is a display concern.
    """
    diversification = diversification_score(assets, settings)
    balance = balance_score(assets, settings, drift=drift)
    resilience = resilience_score(assets, settings)
    risk = risk_score(assets, settings)

    overall = overall_score({
        'diversification': diversification.score,
        'balance': balance.score,
        'resilience': resilience.score,
        'risk': risk.score,
    })
    grade = letter_grade(overall)
    logger.debug(
        f"Quality {overall:.1f} ({grade}): div={diversification.score:.1f} bal={balance.score:.1f} "
        f"res={resilience.score:.1f} risk={risk.score:.1f}"
    )

    return QualityScore(
        overall=overall,
        grade=grade,
        diversification=diversification,
        balance=balance,
        resilience=resilience,
        risk=risk,
        recommendations=build_recommendations(diversification, balance, resilience, risk),
    )
