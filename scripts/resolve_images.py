#!/usr/bin/env python3
"""CLI runner for the image resolution pipeline.

Resolves one or more image URLs and prints the results as JSON to stdout.

Usage:
  python scripts/resolve_images.py https://example.com/a.jpg
  python scripts/resolve_images.py --best URL1 URL2 URL3
  python scripts/resolve_images.py --base-origin https://shop.test /avatars/a.png
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import List

from adstudio.application.use_cases.image_resolve import ImageResolver
from adstudio.infrastructure.adapters import HttpImageProber


async def run(urls: List[str], *, best: bool, base_origin: str | None, attempts: int) -> str:
    resolver = ImageResolver(HttpImageProber(max_attempts=attempts))
    if best:
        result = await resolver.get_best_image_url(urls, base_origin)
        return result.model_dump_json(indent=2)
    results = await resolver.process_multiple_image_urls(urls, base_origin)
    return json.dumps([r.model_dump(mode="json") for r in results], indent=2)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Resolve image URLs to fetchable URLs and print JSON to stdout",
    )
    parser.add_argument("urls", nargs="+", help="Candidate image URLs")
    parser.add_argument(
        "--best",
        action="store_true",
        help="Print only the highest-priority result among the candidates",
    )
    parser.add_argument(
        "--base-origin",
        default=None,
        help="Origin used to absolutize root-relative URLs",
    )
    parser.add_argument(
        "--attempts", type=int, default=3, help="Probe attempts per URL"
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )
    print(
        asyncio.run(
            run(
                args.urls,
                best=args.best,
                base_origin=args.base_origin,
                attempts=args.attempts,
            )
        )
    )


if __name__ == "__main__":
    main()
