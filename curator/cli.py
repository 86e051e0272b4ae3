from __future__ import annotations

import argparse
import logging
from pathlib import Path

from dotenv import load_dotenv

from .llm import GenerationError
from .normalization import NormalizationError
from .pipeline import generate_to_file, merge_files, run_refresh
from .store import StoreError

LOGGER = logging.getLogger("curator")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Refresh a curated resource list and carry weeks-on-list counters forward")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log every match decision.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate", help="Ask the generative source for a new resource list")
    generate_parser.add_argument(
        "--current-file",
        type=Path,
        default=Path("/tmp/current-resources.json"),
        help="Prior resource list; when present the model runs in update mode.",
    )
    generate_parser.add_argument(
        "--out-file",
        type=Path,
        default=Path("/tmp/new-resources.json"),
        help="Where the generated resource list is written.",
    )

    merge_parser = subparsers.add_parser(
        "merge", help="Reconcile a generated list against the prior one")
    merge_parser.add_argument(
        "--current-file",
        type=Path,
        default=Path("/tmp/current-resources.json"),
        help="Prior resource list.",
    )
    merge_parser.add_argument(
        "--new-file",
        type=Path,
        default=Path("/tmp/new-resources.json"),
        help="Freshly generated resource list.",
    )
    merge_parser.add_argument(
        "--out-dir",
        type=Path,
        default=Path("out"),
        help="Directory that will receive the merged list and report.",
    )

    run_parser = subparsers.add_parser(
        "run", help="Fetch, generate, reconcile and publish in one go")
    run_parser.add_argument(
        "--out-dir",
        type=Path,
        default=Path("out"),
        help="Directory that will receive the merged list and report.",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Skip publishing the merged list to the document store.",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "generate":
            generate_to_file(args.out_file, current_path=args.current_file)
        elif args.command == "merge":
            merge_files(
                current_path=args.current_file,
                new_path=args.new_file,
                out_dir=args.out_dir,
            )
        elif args.command == "run":
            run_refresh(out_dir=args.out_dir, dry_run=args.dry_run)
        else:
            parser.error("Unknown command")
    except FileNotFoundError as exc:
        LOGGER.error("File not found: %s", exc)
        return 1
    except (GenerationError, NormalizationError, StoreError) as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - exercised via CLI entry point
    raise SystemExit(main())
