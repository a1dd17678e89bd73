#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from .config import feed_config, llm_config, load_config, search_config
from .feed.buffer import FeedBuffer
from .models import Paper, RecommendationContext, SwipeDirection
from .recommender import Recommender

load_dotenv()

logger = logging.getLogger(__name__)

HELP = "[l] skip  [r] like  [u] reload  [s] saved  [q] quit"


def print_paper(p: Paper, remaining: int | None = None) -> None:
    print(f"\n{'='*80}")
    if remaining is not None:
        print(f"  {remaining} in stack")
    print(f"{'='*80}")
    print(f"[{p.paper_id}] {p.title}")
    first_author = p.authors[0] if p.authors else "Unknown"
    et_al = " et al." if len(p.authors) > 1 else ""
    print(f"    Author: {first_author}{et_al}  |  Date: {p.year}")
    print(f"    URL: https://arxiv.org/abs/{p.paper_id}")
    print(f"    Tags: {', '.join(p.tags)}")
    print(f"    TL;DR: {p.tldr}")
    if p.abstract_zh:
        print(f"    Abstract(ZH): {p.abstract_zh}")
    preview = p.abstract_en[:300] + "..." if len(p.abstract_en) > 300 else p.abstract_en
    print(f"    Abstract(EN): {preview}")
    print()


def print_liked(papers: list[Paper]) -> None:
    if not papers:
        print("\n  No saved papers yet.\n")
        return
    print(f"\n  Saved papers ({len(papers)}):")
    for i, p in enumerate(papers, 1):
        print(f"  [{i}] {p.title} ({p.paper_id})")
    print()


def save_json(papers: list[Paper], output_dir: str, prefix: str = "papers") -> str:
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = Path(output_dir) / f"{prefix}_{timestamp}.json"
    data = [asdict(p) for p in papers]
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return str(filepath)


def run_interactive(feed: FeedBuffer, read=input) -> None:
    logger.info("Searching arXiv & translating...")
    feed.start()

    while True:
        paper = feed.current
        if paper is None:
            print("\n  No more papers found. [u] retry  [s] saved  [q] quit")
        else:
            print_paper(paper, remaining=len(feed.state.papers))
            print(HELP)

        try:
            cmd = read("> ").strip().lower()
        except EOFError:
            break

        if cmd == "q":
            break
        if cmd == "s":
            print_liked(feed.state.liked)
        elif cmd == "u":
            if feed.reload() == 0 and feed.exhausted:
                logger.warning("Reload returned no new papers.")
        elif cmd in ("l", "r"):
            direction = SwipeDirection.RIGHT if cmd == "r" else SwipeDirection.LEFT
            feed.swipe(direction)
        else:
            print(HELP)


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="PaperSwipe: swipe through recent arXiv papers")
    parser.add_argument("-c", "--config", default="config.yaml")
    parser.add_argument("--no-llm", action="store_true", help="Skip LLM translation/tagging")
    parser.add_argument("--once", action="store_true", help="Fetch a single batch, print it and exit")
    parser.add_argument("--seed", type=int, default=None, help="Seed for strategy selection")
    parser.add_argument("--save-liked", action="store_true", help="Write liked papers to JSON on exit")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        cfg = load_config(args.config)
    except OSError as e:
        print(f"Error: could not read config '{args.config}': {e}")
        sys.exit(1)

    feed_cfg = feed_config(cfg)
    recommender = Recommender(
        search_config=search_config(cfg),
        llm_config=llm_config(cfg),
        rng=random.Random(args.seed) if args.seed is not None else None,
        enrich=not args.no_llm,
    )

    output_cfg = cfg.get("output", {})
    json_dir = output_cfg.get("json_dir", "results")

    if args.once:
        papers = recommender(RecommendationContext(current_focus=feed_cfg.focus), 0)
        if not papers:
            print("\n  No papers found.\n")
            return
        for p in papers:
            print_paper(p)
        if output_cfg.get("json_file", True):
            logger.info(f"Saved JSON: {save_json(papers, json_dir)}")
        return

    feed = FeedBuffer(recommender, watermark=feed_cfg.watermark, focus=feed_cfg.focus)
    run_interactive(feed)

    if args.save_liked and feed.state.liked:
        logger.info(f"Saved liked papers: {save_json(feed.state.liked, json_dir, prefix='liked')}")

    logger.info("Done!")


if __name__ == "__main__":
    main()
