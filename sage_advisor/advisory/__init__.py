"""
Advisory pipeline: turns a resolved context into a ranked, explained result.

Modules
-------
resolver        : resolve_context() — free text / structured / opaque state
                  → AdvisoryContext.
generator       : generate_candidates() — domain rules, general patterns,
                  optimization rules; failures isolated per pass.
ranker          : compute_composite_score() + rank_recommendations() +
                  select_recommendations() — pure functions.
decision_matrix : build_decision_matrix() — weighted multi-criteria re-ranking.
assessor        : assess_risks() + assess_opportunities().
composer        : compose_result() — confidence, reasoning, metadata.
history         : HistoryStore — bounded, lock-serialized ring buffer.
engine          : AdvisoryEngine — wires the pipeline together.
"""
