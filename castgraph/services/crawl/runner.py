from __future__ import annotations

import argparse
import logging
import os
from typing import Optional

from castgraph.services.graph import GraphStore, analytics, distribute_all, load_snapshot, repair, save_snapshot
from castgraph.services.import_service import import_dataset

from .orchestrator import (
    DEFAULT_ACTOR_BUDGET,
    DEFAULT_MAX_DELAY,
    DEFAULT_MOVIE_BUDGET,
    CrawlOrchestrator,
)
from .spiders.wikipedia_spider import WikipediaSpider

logger = logging.getLogger(__name__)


def run_crawl(
    seed_name: str,
    seed_link: str,
    *,
    actor_budget: int,
    movie_budget: int,
    max_delay: float,
    out_path: str,
    fetcher=None,
) -> GraphStore:
    """Crawl from a seed actor, then repair, weigh and snapshot the graph."""
    store = GraphStore()
    orchestrator = CrawlOrchestrator(
        store,
        fetcher or WikipediaSpider(),
        actor_budget=actor_budget,
        movie_budget=movie_budget,
        max_delay=max_delay,
    )
    orchestrator.run(seed_name, seed_link)
    repair(store)
    distribute_all(store)
    save_snapshot(store, out_path)
    return store


def log_report(store: GraphStore, *, movie: str, actor: str, cast_of: str, year: int, count: int) -> None:
    """Log the showcase queries over a finished graph."""
    queries = [
        ("1. Find how much a movie has grossed", lambda: analytics.box_office_of(store, movie)),
        ("2. List which movies an actor has worked in", lambda: analytics.movies_containing_actor(store, actor)),
        ("3. List which actors worked in a movie", lambda: analytics.actors_in_movie(store, cast_of)),
        ("4. List the top X actors with the most total grossing value", lambda: analytics.top_grossing_actors(store, count)),
        ("5. List the oldest X actors", lambda: analytics.oldest_actors(store, count)),
        ("6. List all the movies for a given year", lambda: analytics.movies_for_year(store, year)),
        ("7. List all the actors for a given year", lambda: analytics.actors_for_year(store, year)),
    ]
    for title, query in queries:
        logger.info(title)
        try:
            logger.info("%s", query())
        except LookupError as exc:
            logger.warning("%s", exc)


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name) or default)


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name) or default)


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Build and inspect the actor/movie graph")
    parser.add_argument("--log-file", default="log.txt", help="Log file path ('-' for stderr only)")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    sub = parser.add_subparsers(dest="cmd", required=True)
    default_out = os.path.join("data", "graph.json")

    crawl = sub.add_parser("crawl", help="Crawl Wikipedia starting from one actor")
    crawl.add_argument("seed_name", help="Starting actor, e.g. 'Morgan Freeman'")
    crawl.add_argument("seed_link", help="Starting actor page, e.g. /wiki/Morgan_Freeman")
    crawl.add_argument("--actors", type=int, default=_env_int("CASTGRAPH_ACTOR_BUDGET", DEFAULT_ACTOR_BUDGET))
    crawl.add_argument("--movies", type=int, default=_env_int("CASTGRAPH_MOVIE_BUDGET", DEFAULT_MOVIE_BUDGET))
    crawl.add_argument("--max-delay", type=float, default=_env_float("CASTGRAPH_MAX_DELAY", DEFAULT_MAX_DELAY))
    crawl.add_argument("--out", default=default_out, help="Snapshot output path")

    imp = sub.add_parser("import", help="Import the legacy dataset JSON into a snapshot")
    imp.add_argument("dataset", help="Dataset JSON path")
    imp.add_argument("--out", default=default_out, help="Snapshot output path")

    rep = sub.add_parser("repair", help="Repair and re-weigh an existing snapshot in place")
    rep.add_argument("snapshot")

    report = sub.add_parser("report", help="Log the showcase queries for a snapshot")
    report.add_argument("snapshot")
    report.add_argument("--movie", default="Marie")
    report.add_argument("--actor", default="Morgan Freeman")
    report.add_argument("--cast-of", default="Glory")
    report.add_argument("--year", type=int, default=1989)
    report.add_argument("--count", type=int, default=4)

    args = parser.parse_args(argv)
    handlers = [logging.StreamHandler()]
    if args.log_file != "-":
        handlers.append(logging.FileHandler(args.log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )

    if args.cmd == "crawl":
        run_crawl(
            args.seed_name,
            args.seed_link,
            actor_budget=args.actors,
            movie_budget=args.movies,
            max_delay=args.max_delay,
            out_path=args.out,
        )
        print(args.out)
        return 0

    if args.cmd == "import":
        store, summary = import_dataset(args.dataset, project_root=os.getcwd())
        logger.info("Import summary: %s", summary)
        save_snapshot(store, args.out)
        print(args.out)
        return 0

    if args.cmd == "repair":
        store = load_snapshot(args.snapshot)
        repair(store)
        distribute_all(store)
        save_snapshot(store, args.snapshot)
        print(args.snapshot)
        return 0

    if args.cmd == "report":
        store = load_snapshot(args.snapshot)
        log_report(store, movie=args.movie, actor=args.actor, cast_of=args.cast_of, year=args.year, count=args.count)
        return 0

    parser.error("unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
