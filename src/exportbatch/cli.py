from __future__ import annotations

import argparse
import logging
import sys

from .app_logging import log_with_fields, setup_logger
from .config import AppConfig, ensure_local_paths, load_config
from .executors import default_registry
from .models import kind_key
from .orchestrator import BatchOrchestrator
from .registry import ExecutorRegistry
from .utils import artifact_name, utc_now_iso, write_artifact


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="exportbatch", description="Run a batch of export jobs against one input")
    parser.add_argument("--config", required=True, help="Path to exportbatch YAML config")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run every job in the batch")
    run_parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Override batch.max_concurrency from the config",
    )
    subparsers.add_parser("kinds", help="List registered job kinds")
    subparsers.add_parser("validate", help="Check that every job kind has an executor")
    return parser


def build_registry(config: AppConfig) -> ExecutorRegistry:
    registry = default_registry()
    for kind, target in config.executors.items():
        registry.register_path(kind, target)
    return registry


def cmd_run(config: AppConfig, *, max_concurrency: int | None = None) -> int:
    ensure_local_paths(config)
    logger = setup_logger(config.paths.log)
    registry = build_registry(config)
    shared_input = config.paths.input.read_bytes()
    limit = max_concurrency if max_concurrency is not None else config.batch.max_concurrency

    def on_progress(completed: int, total: int, identifier: str) -> None:
        print(f"[{completed}/{total}] {identifier}")

    orchestrator = BatchOrchestrator(registry, max_concurrency=limit, logger=logger)
    report = orchestrator.execute(config.jobs, shared_input, on_progress=on_progress)

    for identifier, outcome in report.successes():
        written = write_artifact(config.paths.output, artifact_name(identifier, outcome.kind), outcome.payload)
        log_with_fields(
            logger,
            logging.INFO,
            "artifact_written",
            identifier=identifier,
            path=str(written),
            bytes_written=outcome.bytes_produced,
        )

    print(f"{report.succeeded_count} of {report.total} succeeded ({report.total_bytes} bytes, {report.total_elapsed:.2f}s)")
    for identifier, failure in report.failures():
        print(f"  failed {identifier}: {failure.error_type}: {failure.error_message}", file=sys.stderr)
    log_with_fields(logger, logging.INFO, "run_complete", finished_at=utc_now_iso(), ok=report.ok)
    return 0 if report.ok else 1


def cmd_kinds(config: AppConfig) -> int:
    registry = build_registry(config)
    for kind in registry.kinds():
        print(kind)
    return 0


def cmd_validate(config: AppConfig) -> int:
    registry = build_registry(config)
    missing = [job for job in config.jobs if job.kind not in registry]
    if not config.paths.input.is_file():
        print(f"input file not found: {config.paths.input}", file=sys.stderr)
        return 2
    if missing:
        for job in missing:
            print(f"no executor for {job.identifier}: kind {kind_key(job.kind)!r}", file=sys.stderr)
        return 2
    print(f"{len(config.jobs)} jobs ok")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config)

    if args.command == "run":
        if args.max_concurrency is not None and args.max_concurrency < 1:
            parser.error("--max-concurrency must be >= 1")
        return cmd_run(config, max_concurrency=args.max_concurrency)
    if args.command == "kinds":
        return cmd_kinds(config)
    if args.command == "validate":
        return cmd_validate(config)
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
