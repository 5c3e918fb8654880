"""Rebuild the blog with Hugo and publish it into the sibling site checkout.

Replaces the old deploy.sh:

    rm -rf public
    hugo -v
    rm -rf ../smyrgeorge.github.io/*
    cp -R public/* ../smyrgeorge.github.io/

`--mode legacy` (the default) keeps that exact sequence, including running
every step whatever the previous one returned. `--mode safe` renders into a
scratch directory, refuses to publish an empty site and swaps the target in
with renames. Settings come from BLOG_* environment variables or a `.env`
file; flags override them.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from dotenv import find_dotenv, load_dotenv

# BLOG_DB_PATH is read when blogkit.db is imported; .env lives in the checkout.
load_dotenv(find_dotenv(usecwd=True))

from blogkit.worker.build import load_deploy_config, run_deploy_pipeline  # noqa: E402

logger = logging.getLogger("blogkit.deploy")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--mode", choices=("legacy", "safe"), default=None)
    parser.add_argument("--site-root", default=None, help="Hugo site directory")
    parser.add_argument("--target", default=None, help="Publishing checkout")
    parser.add_argument("--hugo-bin", default=None)
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", dest="verbose", action="store_true", default=None
    )
    verbosity.add_argument("-q", "--quiet", dest="verbose", action="store_false")
    parser.add_argument(
        "--commit",
        action="store_true",
        default=None,
        help="Commit the target checkout after a safe deploy",
    )
    parser.add_argument("--push", action="store_true", default=None)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_deploy_config()
    except ValueError as exc:
        logger.error("%s", exc)
        return 2
    if args.mode is not None:
        config.mode = args.mode
    if args.site_root is not None:
        config.site_root = args.site_root
    if args.target is not None:
        config.publish_target = args.target
    if args.hugo_bin is not None:
        config.hugo_bin = args.hugo_bin
    if args.verbose is not None:
        config.verbose = args.verbose
    if args.commit:
        config.commit = True
    if args.push:
        config.push = True

    result = run_deploy_pipeline(config, trigger="cli")
    for stage in result.stages:
        marker = "ok" if stage.ok else "FAILED"
        logger.info("%-12s %s %s", stage.name, marker, stage.detail or "")
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
