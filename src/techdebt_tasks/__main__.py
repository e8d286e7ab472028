import argparse
import sys

import structlog

from .config import load_config
from .generator import generate_tasks, tasks_payload
from .logging_config import configure_logging
from .renderer import write_markdown
from .utils import load_analysis, repository_context, write_json

logger = structlog.get_logger(__name__)


def non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="techdebt-tasks", description="Turn analysis findings into ranked tasks")
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Generate tasks from an analysis JSON file")
    gen.add_argument("analysis", help="JSON file with per-file analysis results")
    gen.add_argument("--repo", default="", help="Repository full name (owner/name)")
    gen.add_argument("--config-dir", default=".", help="Directory holding .techdebt-tasks.yml")
    gen.add_argument("--last-commit", default=None, help="ISO timestamp of the last commit")
    gen.add_argument("--open-issues", type=int, default=0, help="Number of open issues")
    gen.add_argument("--out", default=".", help="Directory for written reports")
    gen.add_argument("--markdown", action="store_true", help="Emit TECH_DEBT_TASKS.md")
    gen.add_argument("--json", action="store_true", help="Emit tech-debt-tasks.json")
    gen.add_argument("--max-items", type=non_negative_int, default=None, help="Safety cap on number of tasks")
    gen.add_argument("--log-level", default=None, help="Override configured log level")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config_dir)
        log_cfg = cfg.data.get("logging") or {}
        configure_logging(args.log_level or log_cfg.get("level", "INFO"), log_cfg.get("format", "console"))
        weights = cfg.weights()
        results = load_analysis(args.analysis)
        repository = repository_context(args.repo, args.last_commit, args.open_issues)
        exclude = cfg.exclude
        max_items = args.max_items if args.max_items is not None else cfg.max_items
    except (ValueError, OSError) as e:
        logger.error("generate_failed", error=str(e))
        return 1

    tasks = generate_tasks(results, repository, weights, exclude=exclude, max_items=max_items)
    payload = tasks_payload(tasks, repository)

    if args.json:
        logger.info("report_written", path=write_json(payload, args.out))
    if args.markdown:
        logger.info("report_written", path=write_markdown(payload, args.out))
    if not (args.json or args.markdown):
        for item in payload["items"]:
            print(f"{item['priority_score']:>6}  {item['title']}  ({item['file_path']}:{item['line_number']})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
