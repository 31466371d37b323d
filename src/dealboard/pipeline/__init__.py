"""Deal pipeline -- stage registry, metrics, transitions, and board projection.

Provides the DealStage registry, Pydantic schemas (Deal, filters, metrics,
board columns), the pure metrics/transition/grouping functions, the
DealRepository boundary with an in-memory implementation, and
PipelineService for async orchestration.
"""
