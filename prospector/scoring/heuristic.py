"""Potential score heuristic - How much does this business need us?"""

from typing import Optional

from ..config import ScoringConfig
from ..models import AIInsight, BusinessData, InsightSource

OFFER_WEBSITE = "Création Site Web"
OFFER_REPUTATION = "Gestion e-réputation"
OFFER_SEO = "Optimisation SEO"

STANDARD_PROFILE = "Profil standard"


def _has_low_rating(business: BusinessData, config: ScoringConfig) -> bool:
    return business.rating is not None and business.rating < config.low_rating_threshold


def score_business(
    business: BusinessData,
    config: Optional[ScoringConfig] = None,
) -> AIInsight:
    """
    Estimate the potential of a business without calling the AI.

    Starts from a base score and adds points for missing web presence and
    weak reputation. Deterministic and free of side effects.

    Args:
        business: The business to score
        config: Scoring configuration (uses defaults if not provided)

    Returns:
        Insight on the 0-10 scale
    """
    config = config or ScoringConfig()
    score = config.base_score
    reasons = []

    if not business.website:
        score += config.no_website_weight
        reasons.append("Pas de site web")

    if _has_low_rating(business, config):
        score += config.low_rating_weight
        reasons.append(f"Note faible ({business.rating})")
    elif business.rating is None:
        score += config.no_rating_weight
        reasons.append("Pas d'avis")

    score = max(0, min(score, config.max_score))

    if not business.website:
        offer = OFFER_WEBSITE
    elif _has_low_rating(business, config):
        offer = OFFER_REPUTATION
    else:
        offer = OFFER_SEO

    return AIInsight(
        score=score,
        analysis_summary=", ".join(reasons) if reasons else STANDARD_PROFILE,
        suggested_offer=offer,
        is_target=score >= config.target_threshold,
        scale=config.max_score,
        source=InsightSource.HEURISTIC,
    )


def get_score_breakdown(
    business: BusinessData,
    config: Optional[ScoringConfig] = None,
) -> dict:
    """
    Get a detailed breakdown of the heuristic score.

    Args:
        business: The business to analyze
        config: Scoring configuration (uses defaults if not provided)

    Returns:
        Dictionary with score components and explanations
    """
    config = config or ScoringConfig()
    breakdown = {
        "total": config.base_score,
        "components": [{"factor": "Base score", "points": config.base_score}],
    }

    if not business.website:
        breakdown["components"].append({
            "factor": "No website",
            "points": config.no_website_weight,
        })
        breakdown["total"] += config.no_website_weight

    if _has_low_rating(business, config):
        breakdown["components"].append({
            "factor": f"Low rating ({business.rating}★)",
            "points": config.low_rating_weight,
        })
        breakdown["total"] += config.low_rating_weight
    elif business.rating is None:
        breakdown["components"].append({
            "factor": "No rating",
            "points": config.no_rating_weight,
        })
        breakdown["total"] += config.no_rating_weight

    breakdown["total"] = max(0, min(breakdown["total"], config.max_score))
    return breakdown
