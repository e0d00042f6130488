# Scoring Policy and Thresholds
# ============================
# Single source of truth for every constant the quality scorer and the
# rebalancing advisor use. Weights in each group sum to 1.

"""
SCORING POLICY
==============

The quality score combines four independent sub-scores. Each constant below
is a policy decision; changing one changes every score computed afterwards,
so tests pin the documented values.

METHODOLOGY:
- HHI is measured on the percentage scale: sum(pct^2), pct in [0, 100]
  (10000 = everything in one bucket)
- Every sub-score is a float in [0, 100]; rounding happens only at display
- Boundaries are strict: a value exactly at a threshold is not flagged
"""

from typing import Dict, List, Tuple


# =========================
# OVERALL SCORE
# =========================

QUALITY_WEIGHTS: Dict[str, float] = {
    'diversification': 0.25,
    'balance': 0.25,
    'resilience': 0.25,
    'risk': 0.25,
}

# (minimum overall score, letter) checked top-down
GRADE_CUTOFFS: List[Tuple[float, str]] = [
    (90.0, 'A'),
    (75.0, 'B'),
    (60.0, 'C'),
    (40.0, 'D'),
]
FAILING_GRADE = 'F'

# Sub-scores below this emit a recommendation
HEALTHY_SCORE = 80.0

# Recommendation priority: score < high -> high, < medium -> medium, else low
RECOMMENDATION_PRIORITY = {
    'high': 50.0,
    'medium': 70.0,
}

# Area order used to break ties between equal sub-scores
AREA_ORDER = ('diversification', 'balance', 'resilience', 'risk')


# =========================
# DIVERSIFICATION
# =========================

HHI_MAX = 10000.0

# Individual holdings weigh heavily: a 25% position is a concentration risk
# even when the asset-class split looks balanced
HHI_AXIS_WEIGHTS: Dict[str, float] = {
    'individual': 0.25,
    'asset_class': 0.30,
    'currency': 0.20,
    'region': 0.15,
    'sector': 0.10,
}

# Sector HHI when the portfolio holds no equities
NEUTRAL_SECTOR_HHI = 5000.0

# Per-axis HHI above which the axis is named as a weakness
HHI_WEAK_AXIS = {
    'individual': 1500.0,
    'asset_class': 5000.0,
    'currency': 7000.0,
    'region': 8000.0,
    'sector': 5000.0,
}

LARGEST_POSITION_WARNING = 15.0   # % of portfolio in one holding


# =========================
# BALANCE
# =========================

# score = 100 - SCALE * (total_drift / NORMALIZER) ** EXPONENT
BALANCE_CURVE = {
    'scale': 10.0,
    'normalizer': 50.0,
    'exponent': 1.5,
}


# =========================
# RESILIENCE
# =========================

RESILIENCE_TARGETS = {
    'liquidity_ratio': 0.10,        # 10% liquid = full liquidity marks
    'defensive_ratio': 0.25,        # 25% bonds+cash = full defensive marks
    'emergency_min_months': 3.0,    # below: 0 -> 70 points linearly
    'emergency_full_months': 6.0,   # 3..6 months: 70 -> 100, saturating above
    'emergency_min_points': 70.0,
}

RESILIENCE_WEIGHTS: Dict[str, float] = {
    'liquidity': 0.3,
    'defensive': 0.3,
    'emergency': 0.4,
}


# =========================
# CONCENTRATION RISK
# =========================

# A flagged risk is critical when its share exceeds this multiple of the threshold
CRITICAL_MULTIPLIER = 1.5

RISK_PENALTIES = {
    'critical_base': 20.0,
    'critical_per_point': 1.0,
    'warning_base': 10.0,
    'warning_per_point': 0.5,
}


# =========================
# REBALANCING
# =========================

# Sell preference by account type: lower rank is sold first.
# TFSA room is scarce and RA withdrawals carry penalties.
ACCOUNT_SELL_RANK = {
    'Taxable': 0,
    'TFSA': 1,
    'RA': 2,
}

# Account types whose disposals are not CGT events
CGT_EXEMPT_ACCOUNTS = frozenset({'TFSA', 'RA'})


def validate_policy() -> None:
    """Check that every weight group sums to 1 (called from the test-suite)."""
    for name, group in (
        ('QUALITY_WEIGHTS', QUALITY_WEIGHTS),
        ('HHI_AXIS_WEIGHTS', HHI_AXIS_WEIGHTS),
        ('RESILIENCE_WEIGHTS', RESILIENCE_WEIGHTS),
    ):
        total = sum(group.values())
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"{name} sums to {total}, expected 1.0")
