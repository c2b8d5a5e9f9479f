"""CLI entry point for baking the site.

Usage:
    python -m src.baker.main
    python -m src.baker.main --steps posts rss
    python -m src.baker.main --deploy "Update site" \\
        --author-email jane@example.org --author-name "Jane Doe"
"""

from __future__ import annotations

import argparse
import sys

from src.common.config import Settings
from src.common.logging import setup_logging

from .baker import WordpressBaker
from .shell import ShellRunner

logger = setup_logging(module_name="baker.main")

STEPS = {
    "redirects": WordpressBaker.bake_redirects,
    "blog": WordpressBaker.bake_blog,
    "rss": WordpressBaker.bake_rss,
    "assets": WordpressBaker.bake_assets,
    "embeds": WordpressBaker.bake_embeds,
    "frontpage": WordpressBaker.bake_front_page,
    "posts": WordpressBaker.bake_posts,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bake the WordPress site to static files")
    parser.add_argument(
        "--steps",
        nargs="+",
        choices=["all", *STEPS],
        default=["all"],
        help="Bake steps to run, in order (default: all)",
    )
    parser.add_argument(
        "--force-update",
        action="store_true",
        help="Rebake everything regardless of modification time",
    )
    parser.add_argument(
        "--deploy",
        metavar="COMMIT_MSG",
        help="Commit and push the baked directory with this message",
    )
    parser.add_argument("--author-email", help="Commit author email")
    parser.add_argument("--author-name", help="Commit author name")
    parser.add_argument(
        "--log-level",
        help="Log level name (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log shell commands (rsync, git, grapher) without running them",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.log_level:
            setup_logging(level=args.log_level)
        settings = Settings.load()
        baker = WordpressBaker(
            settings=settings,
            force_update=args.force_update,
            shell=ShellRunner(dry_run=args.dry_run),
        )
    except ValueError as e:
        logger.error("%s", e)
        return 1

    try:
        if "all" in args.steps:
            baker.bake_all()
        else:
            for step in args.steps:
                logger.info("Baking %s...", step)
                STEPS[step](baker)

        logger.info("Bake complete: %d files staged", len(baker.staged_files))

        if args.deploy:
            if baker.deploy(args.deploy, args.author_email, args.author_name):
                logger.info("Deployed to %s", settings.deploy.branch)
    finally:
        baker.end()

    return 0


if __name__ == "__main__":
    sys.exit(main())
