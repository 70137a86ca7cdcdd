import sys
import os
import argparse
from rich.console import Console
from rich.text import Text
from .ui.app import run_tui
from .engine import CueEngine
from .errors import CueNotFoundError
from .utils.config import ConfigManager
from .utils.lang import OUT_TYPE_VALUES, is_cue_file
from .utils.logging_setup import setup_logging


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(description="CueBolt: live lint & eval for CUE files")
    parser.add_argument("file", nargs="?", help=".cue file to watch")
    parser.add_argument("--workspace", "-w", help="Workspace folder; upper bound for the cue.mod search")
    parser.add_argument("--lint", action="store_true", help="Run `cue vet` once and print diagnostics")
    parser.add_argument("--eval", action="store_true", help="Run `cue eval` once and print the output")
    parser.add_argument("-e", "--expression", action="append", default=[], help="Expression to evaluate (repeatable)")
    parser.add_argument("--out", choices=OUT_TYPE_VALUES, help="Eval output type")
    parser.add_argument("--fmt", action="store_true", help="Format the file in place with `cue fmt`")
    parser.add_argument("--flags", help='Extra `cue vet` flags, e.g. "-t env=prod"')
    parser.add_argument("--verbose", "-v", action="store_true", help="Log to the console")
    return parser


def _print_lint(console: Console, engine: CueEngine) -> int:
    state = engine.state
    if state.last_error:
        console.print(state.last_error, markup=False)
        return 1
    for d in state.diagnostics:
        # cue messages quote constraints like `[string]: int`; keep them out of markup
        console.print(
            Text.assemble(
                f"{d.file_path}:{d.line + 1}:{d.column}: ",
                (d.severity, "bold red"),
                f": {d.message}",
            ),
            highlight=False,
            soft_wrap=True,
        )
    if state.has_errors:
        return 1
    console.print("[green]No problems[/green]")
    return 0


def run():
    parser = _build_parser()
    args = parser.parse_args()

    if not args.file:
        print("Error: No source file specified.")
        print("Usage: cuebolt <filename.cue>")
        sys.exit(1)

    # Resolve to absolute path immediately
    abs_path = os.path.abspath(args.file)

    if not os.path.exists(abs_path):
        print(f"Error: File not found: {abs_path}")
        sys.exit(1)

    if not is_cue_file(abs_path):
        print("Error: Active file is not a cue file")
        sys.exit(1)

    config = ConfigManager()
    setup_logging(
        config.get("log_level", "INFO"),
        log_file=config.config_dir / "cuebolt.log",
        console=args.verbose,
    )

    workspace = os.path.abspath(args.workspace) if args.workspace else None
    one_shot = args.lint or args.eval or args.fmt or args.expression

    if not one_shot:
        try:
            run_tui(abs_path, workspace_folder=workspace)
        except KeyboardInterrupt:
            pass
        except Exception as e:
            print(f"Fatal Error: {e}")
            sys.exit(1)
        return

    console = Console()
    engine = CueEngine(abs_path, config_manager=config, workspace_folder=workspace)
    if args.flags is not None:
        engine.lint_flags = args.flags.split()
    exit_code = 0
    try:
        engine.reload_source()
        if args.fmt:
            engine.format()
            if engine.state.last_error:
                console.print(engine.state.last_error, markup=False)
                exit_code = 1
            else:
                console.print(f"Formatted {abs_path}", highlight=False)
        if args.lint:
            engine.lint()
            exit_code = max(exit_code, _print_lint(console, engine))
        if args.eval or args.expression:
            eval_file = engine.evaluate(args.expression, args.out)
            if eval_file is None:
                console.print(engine.state.last_error, markup=False)
                exit_code = 1
            else:
                console.print(engine.state.eval_output, end="", markup=False, highlight=False)
    except CueNotFoundError as e:
        print(str(e))
        exit_code = 1
    finally:
        engine.temp_workspace.cleanup()

    sys.exit(exit_code)

if __name__ == "__main__":
    run()
