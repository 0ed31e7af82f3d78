"""
Recommendation engine: scores the resource catalog against one client's goals
and interaction history, persists the top-ranked resources as pending
recommendations, and manages their accept/decline/delete lifecycle.

Modules
-------
scorer    : ScoreComponents dataclass + compute_components() + score_resource()
            + build_reasoning() — pure functions, no store or I/O.
ranker    : RankedResource dataclass + score_catalog() + rank_resources()
            + build_recommendation_drafts().
generator : RecommendationGenerator — fetch, score, rank, persist (per client
            or for every client).
lifecycle : RecommendationLifecycle + BulkResult — accept/decline/update/delete,
            individually or in bulk.
query     : RecommendationView + filter/sort/search helpers — read side only.
reporter  : write_recommendations_csv() + write_recommendations_json().
formatters: ASCII tables and summaries for the CLI.
"""
