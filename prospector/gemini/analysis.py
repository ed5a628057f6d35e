"""Deep analysis of a single business with schema-constrained output."""

import logging
from typing import Optional

from pydantic import BaseModel

from ..config import Settings
from ..models import AIInsight, BusinessData, InsightSource
from .client import AuthenticationError, GeminiClient, GeminiError
from .parsing import parse_json_payload
from .prompts import build_analysis_prompt

logger = logging.getLogger(__name__)

ANALYSIS_ERROR_SUMMARY = "analysis error"
ANALYSIS_ERROR_OFFER = "verify manually"


class InsightSchema(BaseModel):
    """Response schema imposed on the model."""

    score: float
    analysis_summary: str
    suggested_offer: str
    is_target: bool


def analysis_error_insight() -> AIInsight:
    """Insight returned when the analysis could not be produced."""
    return AIInsight(
        score=0,
        analysis_summary=ANALYSIS_ERROR_SUMMARY,
        suggested_offer=ANALYSIS_ERROR_OFFER,
        is_target=False,
        scale=100,
        source=InsightSource.ERROR,
    )


class Analyzer:
    """
    Scores one business on a 0-100 scale through Gemini.

    Usage:
        analyzer = Analyzer(GeminiClient())
        insight = await analyzer.analyze(business)
        if insight.failed:
            ...
    """

    def __init__(self, client: Optional[GeminiClient], model: Optional[str] = None):
        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[GeminiClient] = None) -> "Analyzer":
        if client is None:
            try:
                client = GeminiClient.from_settings(settings, model=settings.analysis_model)
            except AuthenticationError as e:
                logger.warning("AI analysis disabled: %s", e)
        return cls(client, model=settings.analysis_model)

    async def analyze(self, business: BusinessData) -> AIInsight:
        """
        Analyze a business.

        Args:
            business: The business to analyze

        Returns:
            AIInsight on the 0-100 scale, or the failed insight
            (source=error) when anything goes wrong
        """
        if self.client is None:
            return analysis_error_insight()

        try:
            response = await self.client.generate(
                build_analysis_prompt(business),
                schema=InsightSchema,
                model=self.model,
            )
        except GeminiError as e:
            logger.error("Analysis failed for %s: %s", business.name, e)
            return analysis_error_insight()

        try:
            parsed = InsightSchema.model_validate(parse_json_payload(response.text))
        except ValueError as e:
            logger.error("Analysis for %s violated the schema: %s", business.name, e)
            return analysis_error_insight()

        score = max(0.0, min(parsed.score, 100.0))
        logger.info("Analysis for %s: %.0f/100", business.name, score)

        return AIInsight(
            score=score,
            analysis_summary=parsed.analysis_summary,
            suggested_offer=parsed.suggested_offer,
            is_target=parsed.is_target,
            scale=100,
            source=InsightSource.AI,
        )
