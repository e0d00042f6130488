"""
Portfolio quality scoring: four independent sub-scores plus the combined
score, grade and recommendations.
"""

from wealth_engine.analytics.quality.balance import balance_score, drift_to_score
from wealth_engine.analytics.quality.diversification import diversification_score, hhi
from wealth_engine.analytics.quality.resilience import resilience_score
from wealth_engine.analytics.quality.risk import risk_score
from wealth_engine.analytics.quality.score import calculate_quality_score, letter_grade

__all__ = [
    'balance_score',
    'calculate_quality_score',
    'diversification_score',
    'drift_to_score',
    'hhi',
    'letter_grade',
    'resilience_score',
    'risk_score',
]
