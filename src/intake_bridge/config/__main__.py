"""CLI entry point for configuration introspection.

Usage:
    python -m intake_bridge.config
    python -m intake_bridge.config --check
    python -m intake_bridge.config --env-file .env.local
"""

import argparse
import sys

from .api import resolve_config

# ruff: noqa: T201


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m intake_bridge.config")
    parser.add_argument("--check", action="store_true", help="only validate")
    parser.add_argument("--env-file", default=None, help="load a .env file first")
    args = parser.parse_args(argv)

    try:
        resolved = resolve_config(use_env_file=args.env_file)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.check:
        if resolved.api_url is None:
            print("INTAKE_API_URL is not set", file=sys.stderr)
            return 1
        print("Configuration OK")
        return 0

    print("=== Effective Configuration ===")
    print(resolved.audit())
    return 0


if __name__ == "__main__":
    sys.exit(main())
