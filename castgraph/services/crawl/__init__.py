"""Crawling subsystem.

Structure:
- base.py: PageRecord / SourceMeta types and the PageFetcher contract
- spiders/: page fetchers (Wikipedia actor and film articles)
- orchestrator.py: two-frontier crawl that builds the graph
- runner.py: CLI entrypoint for crawl, dataset import, repair and reports

Fetching uses httpx; HTML parsing uses selectolax.
"""
from .base import PageFetcher, PageRecord, SourceMeta
from .orchestrator import CrawlOrchestrator, CrawlStats

__all__ = [
    "PageFetcher",
    "PageRecord",
    "SourceMeta",
    "CrawlOrchestrator",
    "CrawlStats",
]
