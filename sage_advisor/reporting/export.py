"""
Export helpers for advisory results.

All writers create parent directories and return the written ``Path``.
JSON output uses the external camelCase shape (``riskTolerance``,
``decisionMatrix`` …) produced by ``model_dump(by_alias=True)``.

``flatten_result_for_export()`` converts one result into flat rows — one per
recommendation, with its decision-matrix rank when a matrix exists — so it
loads directly in a spreadsheet.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

from sage_advisor.models.result import AdvisoryResult, HistoryEntry


def result_to_dict(result: AdvisoryResult) -> dict:
    return result.model_dump(mode="json", by_alias=True)


def export_to_json(data: dict | list, path: Path) -> Path:
    """Write ``data`` to a pretty-printed JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def export_result_json(result: AdvisoryResult, path: Path) -> Path:
    return export_to_json(result_to_dict(result), path)


def export_history_json(entries: list[HistoryEntry], path: Path) -> Path:
    return export_to_json(
        [entry.model_dump(mode="json", by_alias=True) for entry in entries], path
    )


def flatten_result_for_export(result: AdvisoryResult) -> list[dict]:
    """One flat row per recommendation.

    Columns: ``rank``, ``id``, ``title``, ``type``, ``category``,
    ``confidence``, ``impact``, ``urgency``, ``matrix_rank``,
    ``matrix_score``, ``risk_level``.
    """
    # Alternatives follow recommendation order one-to-one.
    matrix_ranks: list[tuple[int, float]] = []
    if result.decision_matrix is not None:
        by_id = {r.alternative_id: (r.rank, r.score) for r in result.decision_matrix.rankings}
        matrix_ranks = [by_id[alt.id] for alt in result.decision_matrix.alternatives]

    rows: list[dict] = []
    for rank, rec in enumerate(result.recommendations, start=1):
        m_rank, m_score = matrix_ranks[rank - 1] if matrix_ranks else (None, None)
        rows.append(
            {
                "rank":         rank,
                "id":           rec.id,
                "title":        rec.title,
                "type":         str(rec.type),
                "category":     rec.category or "",
                "confidence":   rec.confidence,
                "impact":       str(rec.impact),
                "urgency":      str(rec.urgency),
                "matrix_rank":  m_rank,
                "matrix_score": m_score,
                "risk_level":   str(result.analysis.risk_assessment.level),
            }
        )
    return rows


def export_result_csv(result: AdvisoryResult, path: Path) -> Path:
    """Write ``flatten_result_for_export(result)`` to a UTF-8 CSV file."""
    rows = flatten_result_for_export(result)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not rows:
        path.write_text("", encoding="utf-8")
        return path
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        writer.writerows(rows)
    return path
