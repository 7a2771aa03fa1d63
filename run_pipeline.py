#!/usr/bin/env python3
"""
Command-line pipeline: discover component sources, extract the component
graph, and write it as JSON together with a run report.

Usage:
    python run_pipeline.py --source-dir ./src
    python run_pipeline.py --source-dir ./src --output-file out/graph.json --print-trace
    python run_pipeline.py --source-dir ./src --config hookgraph.yaml --strict-config
"""

import argparse
import logging
import os
import sys
import time
from dataclasses import replace

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="UI component hook-graph extraction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_pipeline.py --source-dir ./src\n"
            "  python run_pipeline.py --source-dir ./src --jobs 8 --print-trace\n"
        ),
    )

    parser.add_argument(
        "--source-dir",
        required=True,
        help="Directory containing the component sources (.js/.jsx/.ts/.tsx).",
    )
    parser.add_argument(
        "--output-file",
        default="output/component_graph.json",
        help="Where to write the serialized graph. Default: output/component_graph.json",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML file with extractor settings.",
    )
    parser.add_argument(
        "--report-dir",
        default="output/run_reports",
        help="Directory for the JSON run report. Default: output/run_reports",
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=False,
        help="Fail on invalid configuration instead of falling back to defaults.",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Number of recognition workers (overrides the config file).",
    )
    parser.add_argument(
        "--print-trace",
        action="store_true",
        default=False,
        help="Print a human-readable dump of the extracted graph.",
    )

    return parser.parse_args(argv)


def run_extraction(args: argparse.Namespace) -> dict:
    """Run discovery, extraction and output; return the run report payload."""
    from componentgraph import HookExtractor, find_roots
    from core.config_loader import load_extractor_config, resolve_strict_config_validation
    from core.run_artifacts import write_graph_json
    from core.structured_logging import phase_scope
    from extraction.project import discover_source_files

    strict = args.strict_config or resolve_strict_config_validation()
    config = load_extractor_config(args.config, strict=strict)
    if args.jobs is not None:
        config = replace(config, max_workers=max(1, args.jobs))

    with phase_scope("discover"):
        records = discover_source_files(args.source_dir)

    logger.info("Source directory : %s", os.path.abspath(args.source_dir))
    logger.info("Files discovered : %d", len(records))

    t0 = time.time()
    extractor = HookExtractor(config)
    graph = extractor.set_project(records)
    elapsed = time.time() - t0
    logger.info("Extraction completed in %.2fs", elapsed)

    with phase_scope("output"):
        output_path = write_graph_json(extractor.to_dict(), args.output_file)
        logger.info("Graph written to %s", output_path)
        if args.print_trace:
            extractor.print()

    return {
        "source_dir": os.path.abspath(args.source_dir),
        "output_file": output_path,
        "elapsed_seconds": round(elapsed, 3),
        "stats": extractor.stats.to_dict(),
        "roots": [c.name for c in find_roots(graph)],
        "diagnostics": [d.to_dict() for d in extractor.diagnostics],
        "status": "success",
    }


def main(argv=None) -> None:
    """Main entry point for the pipeline."""
    from core.run_artifacts import write_run_report
    from core.structured_logging import configure_structured_logging, set_run_id

    configure_structured_logging(level=logging.INFO)
    args = parse_args(argv)
    run_id = set_run_id()

    run_report = {"run_id": run_id, "pipeline": "component_graph", "status": "failed"}
    try:
        run_report.update(run_extraction(args))
        report_path = write_run_report(run_report, run_id, output_dir=args.report_dir)
        logger.info("Run report written: %s", report_path)
    except FileNotFoundError as e:
        run_report["error"] = str(e)
        write_run_report(run_report, run_id, output_dir=args.report_dir)
        logger.error("File error: %s", e)
        sys.exit(1)
    except Exception as e:
        run_report["error"] = str(e)
        write_run_report(run_report, run_id, output_dir=args.report_dir)
        logger.error("Pipeline failed: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
