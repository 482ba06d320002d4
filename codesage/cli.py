"""
Command line entry point for CodeSage.

Usage:
    codesage review path/to/file.py
    codesage fix path/to/file.py
    codesage plan path/to/file.py
    codesage insights history.json
    codesage set-key AIza...

The API key is read from GEMINI_API_KEY (a .env file is honored) and
otherwise from the settings file written by `codesage set-key`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from codesage import config
from codesage.contracts.credentials import CredentialStore
from codesage.errors import ConfigurationError
from codesage.review.reviewer import CodeReviewer
from codesage.storage.credentials import EnvironmentCredentialStore, JsonFileCredentialStore


def resolve_credentials(settings_file: Path) -> CredentialStore:
    """Prefer the environment; fall back to the JSON settings file."""
    env_store = EnvironmentCredentialStore()
    if env_store.get():
        return env_store
    return JsonFileCredentialStore(settings_file)


def _read_source(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


async def _run(args: argparse.Namespace) -> int:
    if args.command == "set-key":
        reviewer = CodeReviewer(JsonFileCredentialStore(args.settings_file))
        reviewer.set_api_key(args.key)
        print(f"API key saved to {args.settings_file}")
        return 0

    credentials = resolve_credentials(args.settings_file)

    async with CodeReviewer(credentials, language=args.language) as reviewer:
        if args.command == "insights":
            history = json.loads(Path(args.history).read_text(encoding="utf-8"))
            if not isinstance(history, list):
                print("History file must contain a JSON list", file=sys.stderr)
                return 1
            insights = await reviewer.synthesize_insights(history)
            print(json.dumps(insights.to_wire(), indent=2))
            return 0

        code = _read_source(args.file)
        record = await reviewer.analyze(code)

        if args.command == "review":
            print(json.dumps(record.to_wire(), indent=2))
        elif args.command == "fix":
            print(await reviewer.generate_fixed_code(code, record.issues))
        elif args.command == "plan":
            print(await reviewer.suggest_improvements(code, record))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codesage", description="AI code review with Gemini")
    parser.add_argument("--version", action="version", version=f"{config.APP_NAME} {config.APP_VERSION}")
    parser.add_argument(
        "--settings-file",
        type=Path,
        default=config.CREDENTIALS_FILE,
        help="JSON settings file holding the API key",
    )
    parser.add_argument("--language", default=config.DEFAULT_LANGUAGE, help="Language of the source file")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("review", "Score a file and list its issues (JSON)"),
        ("fix", "Print an improved version of a file"),
        ("plan", "Print a learning plan based on a review of a file"),
    ):
        command = subparsers.add_parser(name, help=help_text)
        command.add_argument("file", help="Source file to review")

    insights = subparsers.add_parser("insights", help="Summarize trends in a review history (JSON)")
    insights.add_argument("history", help="JSON file with a list of past reviews")

    set_key = subparsers.add_parser("set-key", help="Store the Gemini API key")
    set_key.add_argument("key")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(_run(args))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
