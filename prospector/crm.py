"""CRM view helpers over the stored prospects."""

from .models import Prospect, UserStatus

SORT_KEYS = ("score", "date")


def sort_prospects(prospects: list[Prospect], sort_by: str = "score") -> list[Prospect]:
    """
    Sort prospects for display, best first.

    Args:
        prospects: Prospects to sort (not modified)
        sort_by: "score" (canonical score, unanalysed = 0) or "date" (newest first)
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by}")

    if sort_by == "score":
        return sorted(prospects, key=lambda p: p.score, reverse=True)
    return sorted(prospects, key=lambda p: p.created_at, reverse=True)


def status_breakdown(prospects: list[Prospect]) -> dict[str, int]:
    """Count prospects per status, listing every status (including zeros)."""
    counts = {status.value: 0 for status in UserStatus}
    for prospect in prospects:
        counts[prospect.user_status.value] += 1
    return counts
