#!/usr/bin/env python3
"""
trimcheck CLI entrypoint

Subcommands:
  - check:  load a semantic model dump and report IL2026 call sites
  - init:   generate trimcheck.yaml
"""
from __future__ import annotations

import sys
import json
import argparse
from pathlib import Path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="trimcheck", description="Trimming hazard check (IL2026)")
    sub = parser.add_subparsers(dest="cmd")

    p_check = sub.add_parser("check", help="Check a semantic model dump")
    p_check.add_argument("model", type=Path, help="Path to the model dump (YAML or JSON)")
    p_check.add_argument("--config", type=Path, default=None, help="Path to trimcheck config (default: auto-discover)")
    p_check.add_argument("--json", action="store_true", dest="json_output", help="Output findings as JSON")
    p_check.add_argument("--graph", action="store_true", help="Also render a caller -> member graph")
    p_check.add_argument("--output", default=None, help="Override graph output directory")
    p_check.add_argument("--publish-trimmed", default=None, help="Override the PublishTrimmed property")
    p_check.add_argument("--warnings-as-errors", action="store_true", help="Exit 1 when any finding is reported")

    p_init = sub.add_parser("init", help="Generate trimcheck.yaml")
    p_init.add_argument("--force", action="store_true", help="Overwrite existing trimcheck.yaml if present")

    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    if args.cmd == "init":
        return _init(force=args.force)
    return _check(args)


def _init(force: bool) -> int:
    from .config_loader import save_example_config

    target = Path("trimcheck.yaml")
    if target.exists() and not force:
        print(f"error: {target} already exists (use --force to overwrite)", file=sys.stderr)
        return 2
    save_example_config(target)
    print(f"wrote {target}", file=sys.stderr)
    return 0


def _check(args: argparse.Namespace) -> int:
    # Lazy import to keep `trimcheck --help` fast
    from .analyzer import check_trimming_hazards
    from .config_loader import ConfigError, load_config
    from .diagnostics import format_diagnostic, generate_findings_summary
    from .model_loader import ModelLoadError, load_model

    try:
        config = load_config(args.config)
    except (ConfigError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.publish_trimmed is not None:
        config.publish_trimmed = args.publish_trimmed
    if args.json_output:
        config.format = "json"
    if args.graph:
        config.graph = True
    if args.output:
        config.output = args.output
    if args.warnings_as_errors:
        config.warnings_as_errors = True

    try:
        compilation = load_model(args.model)
    except (ModelLoadError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    findings = check_trimming_hazards(compilation, config)

    if config.format == "json":
        summary = generate_findings_summary(findings)
        summary["compilation"] = compilation.name
        print(json.dumps(summary, indent=2, ensure_ascii=False))
    elif not findings:
        print("No trimming hazards found.")
    else:
        for finding in findings:
            print(format_diagnostic(finding))
        print(f"\n{len(findings)} warning(s)")

    if config.graph and findings:
        from .graphviz_render import render_findings_graph

        out_dir = Path(config.output)
        out_dir.mkdir(parents=True, exist_ok=True)
        dot_path, rendered = render_findings_graph(findings, str(out_dir / "trimcheck"))
        if rendered:
            print(f"graph written to {rendered}", file=sys.stderr)
        else:
            print(f"graphviz executable not found; DOT written to {dot_path}", file=sys.stderr)

    return 1 if (config.warnings_as_errors and findings) else 0


if __name__ == "__main__":
    sys.exit(main())
