"""Automation router package.

Routes processed scraper records either to the TrafficPoint pixel (regular
runs) or to per-brand CSV exports on S3 (monthly runs). The HTTP surface
lives in `automation_router.main`; the orchestrator in
`automation_router.services.router_engine`.
"""

__all__: list[str] = []
