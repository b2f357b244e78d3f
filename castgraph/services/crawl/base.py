from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional, Tuple

from castgraph.services.graph import NodeKind


def sha256_hexdigest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


@dataclass
class SourceMeta:
    source_site: str
    source_url: Optional[str]
    fetched_at: str  # ISO8601
    parser: str
    content_hash: Optional[str] = None


@dataclass
class PageRecord:
    """What a fetcher extracted from one actor or movie page.

    ``attributes`` holds node fields (age for actors; box_office and year for
    movies). ``neighbors`` is the ordered list of (name, link) pairs of the
    opposite kind found on the page.
    """

    kind: NodeKind
    attributes: Dict[str, Any] = field(default_factory=dict)
    neighbors: List[Tuple[str, str]] = field(default_factory=list)
    meta: Optional[SourceMeta] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["kind"] = self.kind.value
        d["neighbors"] = [list(n) for n in self.neighbors]
        # Flatten meta for easier downstream processing
        meta = d.pop("meta", None)
        for k, v in (meta or {}).items():
            d[f"meta_{k}"] = v
        return d


class PageFetcher:
    """Fetch and parse a page into a PageRecord.

    Implementations raise FetchFailure for anything that goes wrong
    (network, status code, missing field); the orchestrator does not
    distinguish causes.
    """

    name: str = "base"

    def fetch(self, kind: NodeKind, link: str) -> PageRecord:
        raise NotImplementedError
