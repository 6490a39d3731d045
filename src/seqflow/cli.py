# src/seqflow/cli.py
"""
CLI do SeqFlow (`seqflow --config sequence.toml`).

Códigos de saída:
    0 → run concluída (ou falha com `on_pipeline_failure = "continue"`)
    1 → run abortada por falha de stage
    2 → definição inválida (carregamento, tipagem, nomes, ciclos)

A CLI é um adapter fino: toda a lógica vive em `seqflow.runner`.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from seqflow.core.config.errors import ConfigError
from seqflow.core.config.loader import load_sequence_config
from seqflow.core.engine.engine import execution_summary
from seqflow.core.engine.planner import CircularDependencyError, UnknownStageError, plan_execution
from seqflow.core.exceptions import StageExecutionError
from seqflow.core.pipeline.context import PipelineContext
from seqflow.core.pipeline.registry import DuplicateStageNameError
from seqflow.runner import new_execution_id, run_sequence

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def _split_names(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [n.strip() for n in value.split(",") if n.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="seqflow", description="Config-driven multi-stage ETL sequences")
    parser.add_argument("-c", "--config", required=True, help="Sequence definition (.toml, .yaml, .yml, .json)")
    parser.add_argument("--local-config", default=None, help="Optional local override file (deep-merged)")
    parser.add_argument("--execution-id", default=None, help="Execution id (default: seq_YYYYmmdd_HHMMSS)")
    parser.add_argument("--only", default=None, help="Comma-separated stage names to run")
    parser.add_argument("--skip", default=None, help="Comma-separated stage names to skip")
    parser.add_argument("--dry-run", action="store_true", help="Validate and print the plan without running")
    parser.add_argument("--verbose", action="store_true", help="Print the structured event log")
    parser.add_argument("--fan-out-delay-ms", type=int, default=None,
                        help="Override global.fan_out_delay_ms")
    return parser


def _print_events(ctx: PipelineContext) -> None:
    for event in ctx.events:
        print(json.dumps(event, ensure_ascii=False, default=str))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    only = _split_names(args.only)
    skip = _split_names(args.skip)

    try:
        config = load_sequence_config(path=args.config, local_path=args.local_config)
        config.validate()
        if args.dry_run:
            planned = plan_execution(config.pipelines, config.sequence.execution_order, only=only, skip=skip)
    except (ConfigError, UnknownStageError, CircularDependencyError, DuplicateStageNameError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    if args.dry_run:
        plan = [
            {"name": d.name, "enabled": d.enabled, "endpoint": d.source.endpoint, "dependencies": d.dependencies}
            for d in planned
        ]
        print(json.dumps({"sequence": config.sequence.name, "plan": plan}, indent=2, ensure_ascii=False))
        return EXIT_OK

    ctx = PipelineContext(execution_id=args.execution_id or new_execution_id())
    try:
        run = run_sequence(config, ctx=ctx, only=only, skip=skip, fan_out_delay_ms=args.fan_out_delay_ms)
    except StageExecutionError as exc:
        if args.verbose:
            _print_events(ctx)
        print(json.dumps({"error": exc.message, "details": exc.details, "hint": exc.hint},
                         indent=2, ensure_ascii=False, default=str), file=sys.stderr)
        if config.error_handling.on_pipeline_failure == "continue":
            return EXIT_OK
        return EXIT_FAILED

    if args.verbose:
        _print_events(ctx)
    summary = execution_summary(run.results)
    summary["execution_id"] = run.execution_id
    summary["skipped_pipelines"] = run.skipped
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
