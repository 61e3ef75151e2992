"""CLI parser construction for llm-gateway.

This module wires subparsers but contains no execution logic. Subcommand
handlers live in ``cli_actions``.
"""

from __future__ import annotations

import argparse

from ...config.defaults import GATEWAY_CLI_DEFAULT_PROVIDER

SUBCOMMANDS = frozenset({"run", "providers", "models"})


def add_generation_flags(parser: argparse.ArgumentParser) -> None:
    """Attach the optional generation tunables to a parser.

    Unset flags stay ``None`` so provider defaults apply upstream.
    """
    grp = parser.add_argument_group("generation parameters")
    grp.add_argument("--temperature", type=float, default=None)
    grp.add_argument("--max-tokens", dest="max_tokens", type=int, default=None)
    grp.add_argument("--top-p", dest="top_p", type=float, default=None)
    grp.add_argument("--top-k", dest="top_k", type=int, default=None)
    grp.add_argument("--frequency-penalty", dest="frequency_penalty", type=float, default=None)
    grp.add_argument("--presence-penalty", dest="presence_penalty", type=float, default=None)


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser and subcommands.

    Returns
    -------
    argparse.ArgumentParser
        Parser with ``run`` (default), ``providers`` and ``models``.

    Design
    ------
    No side effects and no I/O; argument shapes only.
    """
    p = argparse.ArgumentParser(
        prog="llm-gateway", description="LLM gateway CLI (safe by default: dry-run)"
    )
    sub = p.add_subparsers(dest="cmd")

    # run
    p_run = sub.add_parser("run", help="Plan or execute a streamed chat request (default)")
    p_run.add_argument("--provider", default=GATEWAY_CLI_DEFAULT_PROVIDER)
    p_run.add_argument("--model", default=None)
    p_run.add_argument("--prompt", default=None)
    p_run.add_argument("--system", default=None, help="Optional system message")
    p_run.add_argument("--endpoint", default=None, help="Base URL overriding the provider default")
    p_run.add_argument("--credential-ref", dest="credential_ref", default=None)
    add_generation_flags(p_run)
    p_run.add_argument("--execute", action="store_true")
    p_run.add_argument("--ndjson", action="store_true", help="Print raw stream frames instead of text")

    # providers
    sub.add_parser("providers", help="List known providers as JSON")

    # models
    p_models = sub.add_parser("models", help="List the models offered by a provider as JSON")
    p_models.add_argument("--provider", default=GATEWAY_CLI_DEFAULT_PROVIDER)

    return p


__all__ = ["build_parser", "add_generation_flags", "SUBCOMMANDS"]
