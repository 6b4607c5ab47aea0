"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept result models and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from sage_advisor.knowledge.registry import RegistrySnapshot
from sage_advisor.models.decision import DecisionMatrix
from sage_advisor.models.result import AdvisoryResult, HistoryEntry


# ── Recommendations ───────────────────────────────────────────────────────────


def format_recommendations_table(result: AdvisoryResult) -> str:
    """Format ranked recommendations as an ASCII table::

        Rank  Title                               Type             Conf  Impact    Urgency
        ----------------------------------------------------------------------------------
           1  Technology Performance Optimiza…    optimization      82%  high      medium
    """
    lines: list[str] = []
    header = (
        f"  {'Rank':>4}  {'Title':<36}  {'Type':<15}  {'Conf':>5}  "
        f"{'Impact':<8}  {'Urgency':<9}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    if not result.recommendations:
        lines.append("  (no recommendations met the confidence threshold)")
        return "\n".join(lines)

    for rank, rec in enumerate(result.recommendations, start=1):
        title = rec.title if len(rec.title) <= 36 else rec.title[:35] + "…"
        lines.append(
            f"  {rank:>4}  {title:<36}  {str(rec.type):<15}  "
            f"{rec.confidence:>5.0%}  {str(rec.impact):<8}  {str(rec.urgency):<9}"
        )
    return "\n".join(lines)


def format_decision_matrix(matrix: DecisionMatrix | None) -> str:
    if matrix is None:
        return "  (decision matrix omitted: fewer than two recommendations)"

    names = {alt.id: alt.name for alt in matrix.alternatives}
    criteria = [c.name for c in matrix.criteria]
    header = f"  {'Rank':>4}  {'Alternative':<36}  {'Score':>6}  " + "  ".join(
        f"{c[:11]:>11}" for c in criteria
    )
    lines = [header, "  " + "-" * (len(header) - 2)]
    for ranking in sorted(matrix.rankings, key=lambda r: r.rank):
        name = names.get(ranking.alternative_id, ranking.alternative_id)[:36]
        row_scores = matrix.scores.get(ranking.alternative_id, {})
        cells = "  ".join(f"{row_scores.get(c, 0.0):>11.2f}" for c in criteria)
        lines.append(f"  {ranking.rank:>4}  {name:<36}  {ranking.score:>6.3f}  {cells}")
    return "\n".join(lines)


def format_result(result: AdvisoryResult, show_matrix: bool = True) -> str:
    """Format a complete advisory result for the terminal."""
    analysis = result.analysis
    risk = analysis.risk_assessment
    opportunity = analysis.opportunity_assessment

    lines: list[str] = []
    lines.append("")
    lines.append("=== Advisory Result ===")
    lines.append(f"  {analysis.summary}")
    lines.append(f"  Overall confidence: {result.confidence:.0%}")
    lines.append("")
    lines.append(format_recommendations_table(result))

    lines.append("")
    lines.append(f"  Risk: {risk.level}")
    for factor, mitigation in zip(risk.factors, risk.mitigations):
        lines.append(f"    - {factor}")
        lines.append(f"      mitigation: {mitigation}")

    lines.append(f"  Opportunity: {opportunity.level} ({opportunity.timeline})")
    for area in opportunity.areas:
        lines.append(f"    - {area}")

    if show_matrix:
        lines.append("")
        lines.append("  Decision matrix:")
        lines.append(format_decision_matrix(result.decision_matrix))

    lines.append("")
    lines.append(f"  {result.reasoning}")
    lines.append(
        f"  [{result.metadata.analysis_method} v{result.metadata.version} | "
        f"{result.metadata.data_points} data points | "
        f"{result.metadata.processing_time:.1f}ms]"
    )
    return "\n".join(lines)


# ── Registry & history ────────────────────────────────────────────────────────


def format_registry(snapshot: RegistrySnapshot) -> str:
    lines: list[str] = ["", "=== Registered Rules ==="]
    if not snapshot.rules:
        lines.append("  (no domain rules registered)")
    for domain in sorted(snapshot.rules):
        lines.append(f"  [{domain}]")
        for rule in snapshot.rules[domain]:
            lines.append(f"    - {rule.name} ({rule.__class__.__name__})")

    lines.append("")
    lines.append("=== Knowledge ===")
    for key in sorted(snapshot.knowledge):
        record = snapshot.knowledge[key]
        lines.append(f"  {key} v{record.version}: {', '.join(sorted(record.data))}")

    lines.append("")
    lines.append("=== Decision Templates ===")
    for name in sorted(snapshot.templates):
        template = snapshot.templates[name]
        lines.append(f"  {name} v{template.version}: {', '.join(template.criteria)}")
    return "\n".join(lines)


def format_history(entries: list[HistoryEntry]) -> str:
    lines: list[str] = ["", "=== Recent Advisory Requests ==="]
    if not entries:
        lines.append("  (history is empty)")
        return "\n".join(lines)
    for entry in entries:
        top = entry.result.recommendations[0].title if entry.result.recommendations else "-"
        lines.append(
            f"  #{entry.sequence:<4} {entry.recorded_at:%Y-%m-%dT%H:%M:%SZ}  "
            f"{entry.context.domain:<12} {len(entry.result.recommendations):>2} recs  "
            f"top: {top}"
        )
    return "\n".join(lines)
