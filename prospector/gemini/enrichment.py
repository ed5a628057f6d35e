"""Contact email discovery through web-grounded Gemini prompts."""

import logging
import re
from typing import Optional

from ..config import EMAIL_PATTERN, SPAM_EMAIL_DOMAINS, SPAM_EMAIL_PATTERNS, Settings
from ..models import BusinessData
from .client import SEARCH_TOOL, AuthenticationError, GeminiClient, GeminiError
from .parsing import strip_code_fences
from .prompts import build_email_prompt

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(EMAIL_PATTERN)
# Only an answer that is nothing but "null" means none; an email next to the word is kept.
NULL_ANSWER = re.compile(r"^\W*null\W*$", re.IGNORECASE)


def is_spam_email(email: str) -> bool:
    """
    Check if email is likely a system address rather than a contact.

    Args:
        email: Email address to check

    Returns:
        True if email appears to be a system/tracking/placeholder address
    """
    email_lower = email.lower()

    if "@" in email_lower:
        domain = email_lower.split("@")[-1]
        if domain in SPAM_EMAIL_DOMAINS:
            return True

    for pattern in SPAM_EMAIL_PATTERNS:
        if re.match(pattern, email_lower):
            return True

    return False


def extract_email(text: str) -> Optional[str]:
    """
    Pull the contact email out of a model answer.

    Args:
        text: Raw answer

    Returns:
        First plausible email (lowercased), or None for "null" or no match
    """
    if not text:
        return None

    cleaned = strip_code_fences(text)
    if NULL_ANSWER.match(cleaned):
        return None

    for match in EMAIL_RE.findall(cleaned):
        email = match.lower()
        if is_spam_email(email):
            logger.debug("Ignoring system email %s", email)
            continue
        return email

    return None


class EmailFinder:
    """
    Finds public contact emails, one prompt per business.

    A failed call reads as "not found". Callers may retry by hand; enrich()
    refuses a second concurrent request for the same key.
    """

    def __init__(self, client: Optional[GeminiClient], model: Optional[str] = None):
        self.client = client
        self.model = model
        self.enriching: set[str] = set()

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[GeminiClient] = None) -> "EmailFinder":
        if client is None:
            try:
                client = GeminiClient.from_settings(settings, model=settings.enrichment_model)
            except AuthenticationError as e:
                logger.warning("Email discovery disabled: %s", e)
        return cls(client, model=settings.enrichment_model)

    def is_enriching(self, key: str) -> bool:
        return key in self.enriching

    async def find_email(self, business: BusinessData) -> Optional[str]:
        """Ask Gemini for the public contact email of a business."""
        if self.client is None:
            return None

        try:
            response = await self.client.generate(
                build_email_prompt(business),
                tools=(SEARCH_TOOL,),
                model=self.model,
            )
        except GeminiError as e:
            logger.warning("Email lookup failed for %s: %s", business.name, e)
            return None

        email = extract_email(response.text)
        logger.info("Email lookup for %s: %s", business.name, email or "not found")
        return email

    async def enrich(self, key: str, business: BusinessData) -> Optional[str]:
        """
        find_email() guarded against duplicate concurrent calls.

        Args:
            key: Identifier of the business in the caller (e.g., source_id)
            business: The business

        Returns:
            The email, or None if not found or already in flight
        """
        if key in self.enriching:
            logger.debug("Email lookup already running for %s", key)
            return None

        self.enriching.add(key)
        try:
            return await self.find_email(business)
        finally:
            self.enriching.discard(key)
