"""Gateway CLI (package entrypoint).

Wires argument parsing to the handlers in ``cli_actions``; performs no
dispatch logic directly.

Public API re-exports:
- ``main``: CLI entrypoint callable
- ``plan_run``: dry-run planner
"""

from __future__ import annotations

import sys
from typing import Optional

from .cli_actions import handle_models, handle_providers, handle_run, plan_run
from .cli_parser import SUBCOMMANDS, build_parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code (0 success, non-zero on error).
    """
    p = build_parser()
    # inject default subcommand "run" when omitted
    argv_list = list(sys.argv[1:] if argv is None else argv)
    if not argv_list or argv_list[0] not in SUBCOMMANDS and argv_list[0] not in {"-h", "--help"}:
        argv_list = ["run"] + argv_list
    args = p.parse_args(argv_list)

    if args.cmd == "providers":
        return handle_providers(args)
    return handle_models(args) if args.cmd == "models" else handle_run(args)


__all__ = ["main", "plan_run"]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
