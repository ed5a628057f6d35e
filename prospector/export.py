"""Export functionality for search results and prospects (CSV, JSON)."""

import csv
import io
import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional

from .models import AIInsight, BusinessData, Prospect, SearchResult
from .scoring import score_business

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["Name", "Address", "Email", "Phone", "Website", "Rating", "Score"]


def _csv_row(business: BusinessData, score) -> list:
    return [
        business.name,
        business.address or "",
        business.email or "",
        business.phone or "",
        business.website or "",
        business.rating if business.rating is not None else "",
        score if score is not None else "",
    ]


def _write_csv(rows: list[list]) -> str:
    # Every field quoted; embedded quotes are doubled
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    writer.writerows(rows)
    return output.getvalue()


def export_csv_string(
    results: list[SearchResult],
    scores: Optional[Mapping[str, AIInsight]] = None,
) -> str:
    """
    Export search results to a CSV string (for download).

    Args:
        results: Results to export, in display order
        scores: Local scores keyed by source_id (computed when missing)

    Returns:
        CSV content as string
    """
    scores = scores or {}
    rows = []
    for result in results:
        insight = scores.get(result.source_id) or score_business(result.business_data)
        rows.append(_csv_row(result.business_data, insight.score))
    return _write_csv(rows)


def export_prospects_csv_string(prospects: list[Prospect]) -> str:
    """Export CRM prospects to a CSV string, scores on the 0-100 scale."""
    rows = [
        _csv_row(p.business_data, p.score if p.ai_insight else None)
        for p in prospects
    ]
    return _write_csv(rows)


def _slug(value: str) -> str:
    slug = re.sub(r"[^\w-]+", "_", value.strip(), flags=re.UNICODE).strip("_")
    return slug or "all"


def export_filename(query: str, locality: str) -> str:
    """
    File name for a search export.

    Examples:
        ("boulangerie", "Lyon") -> "prospects_boulangerie_Lyon.csv"
        ("salon de thé", "Saint-Étienne") -> "prospects_salon_de_thé_Saint-Étienne.csv"
    """
    return f"prospects_{_slug(query)}_{_slug(locality)}.csv"


def export_to_csv(
    results: list[SearchResult],
    output_path: str,
    scores: Optional[Mapping[str, AIInsight]] = None,
) -> str:
    """
    Export search results to a CSV file.

    Args:
        results: Results to export
        output_path: Path to output file
        scores: Local scores keyed by source_id

    Returns:
        Path to the created file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        f.write(export_csv_string(results, scores))

    logger.info("Exported %d results to %s", len(results), output_path)
    return str(output_path)


def export_prospects_json(
    prospects: list[Prospect],
    output_path: str,
    pretty: bool = True,
) -> str:
    """
    Export CRM prospects to a JSON file.

    Args:
        prospects: Prospects to export
        output_path: Path to output file
        pretty: Whether to format JSON with indentation

    Returns:
        Path to the created file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "exported_at": datetime.now().isoformat(),
        "total_prospects": len(prospects),
        "prospects": [p.to_dict() for p in prospects],
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2 if pretty else None, ensure_ascii=False)

    logger.info("Exported %d prospects to %s", len(prospects), output_path)
    return str(output_path)
