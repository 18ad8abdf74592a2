"""
CLI entry point — one-shot commands around the apply workflow.
"""

import argparse
import logging
import sys

from . import file_ops
from .cli_display import print_error, print_status, setup_logger
from .config import Config
from .editing.metrics import read_apply_stats
from .errors import ExtractionFailure
from .llm.base import LLMError
from .llm.ollama import OllamaClient
from .prompts import SYSTEM_PROMPT, build_edit_prompt, build_generate_prompt
from .workflow import ApplyStatus, ApplyWorkflow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llm-patcher",
        description="Apply model-generated diffs to files with preview, "
                    "confirmation and automatic rollback.")
    parser.add_argument("--config", default=None,
                        help="Path to .llm_patcher.yaml config file")
    parser.add_argument("--language", default=None,
                        help="Target language profile (go, java, kotlin, scala)")
    parser.add_argument("--model", default=None,
                        help="Ollama model name (default: from config)")
    parser.add_argument("--auto", action="store_true",
                        help="Approve every change without prompting")
    parser.add_argument("--tui", action="store_true",
                        help="Review changes in the interactive viewer")
    parser.add_argument("--no-stream", action="store_true",
                        help="Disable streaming responses")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Echo warnings to stderr")

    sub = parser.add_subparsers(dest="command", required=True)

    apply_p = sub.add_parser("apply", help="Apply a saved model response to a file")
    apply_p.add_argument("file", help="File to patch")
    apply_p.add_argument("--response", default="-",
                         help="File holding the raw response ('-' for stdin)")

    edit_p = sub.add_parser("edit", help="Ask the model for a diff and apply it")
    edit_p.add_argument("file", help="File to edit")
    edit_p.add_argument("request", nargs="+", help="The change to make")

    create_p = sub.add_parser("create", help="Ask the model for a new file")
    create_p.add_argument("file", help="File to create")
    create_p.add_argument("requirements", nargs="+", help="What the file should do")

    stats_p = sub.add_parser("stats", help="Summarise recorded apply metrics")
    stats_p.add_argument("--last", type=int, default=50,
                         help="Number of recent attempts to include")

    return parser


def _make_client(cfg: Config) -> OllamaClient:
    client = OllamaClient(
        base_url=cfg.OLLAMA_BASE_URL,
        model=cfg.MODEL,
        timeout=cfg.LLM_TIMEOUT,
        max_retries=cfg.LLM_MAX_RETRIES,
        retry_delay=cfg.LLM_RETRY_DELAY,
        stream=cfg.STREAM_RESPONSES,
    )
    client.set_stream_callback(lambda token: print(token, end="", flush=True))
    return client


def _ask_model(cfg: Config, prompt: str) -> str:
    print("🤖 AI: ", end="", flush=True)
    raw = _make_client(cfg).generate_response(prompt, SYSTEM_PROMPT)
    print()
    return raw


def _read_response(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return file_ops.read_file(source)


def _print_stats(stats: dict) -> None:
    if not stats["total"]:
        print_status("📊", "No apply metrics recorded yet")
        return
    print_status("📊", f"Last {stats['total']} attempts: "
                       f"{stats['success_rate']:.0f}% applied, "
                       f"{stats['decline_rate']:.0f}% declined")
    for route, share in stats["routes"].items():
        print(f"   {route}: {share:.0f}%")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "stats":
        _print_stats(read_apply_stats(last_n=args.last))
        return 0

    cfg = Config.load(args.config).override(
        language=args.language,
        model=args.model,
        auto_approve=True if args.auto else None,
        use_tui=True if args.tui else None,
        stream_responses=False if args.no_stream else None,
    )
    setup_logger(cfg.LOG_DIR, verbose=args.verbose)
    logger.info("Command: %s %s (language: %s)", args.command, args.file, cfg.LANGUAGE)

    workflow = ApplyWorkflow(cfg)
    profile = cfg.language_profile()

    try:
        if args.command == "apply":
            raw = _read_response(args.response)
            outcome = workflow.apply(args.file, raw)
        elif args.command == "edit":
            content = file_ops.read_file(args.file)
            request = " ".join(args.request)
            print_status("✏️ ", f"Editing {args.file}: {request}")
            raw = _ask_model(cfg, build_edit_prompt(args.file, content, request, profile))
            outcome = workflow.apply(args.file, raw)
        else:
            requirements = " ".join(args.requirements)
            print_status("⚡", f"Generating {args.file}")
            raw = _ask_model(cfg, build_generate_prompt(args.file, requirements, profile))
            outcome = workflow.create(args.file, raw)
    except LLMError as e:
        print_error(f"talking to Ollama: {e}")
        return 1
    except OSError as e:
        print_error(str(e))
        return 1

    if outcome.status is ApplyStatus.FAILED:
        print_error(str(outcome.error))
        if isinstance(outcome.error, ExtractionFailure) and outcome.error.snippet:
            print(f"   Rejected content: {outcome.error.snippet!r}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
