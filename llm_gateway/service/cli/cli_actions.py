"""CLI action handlers.

Purpose
-------
Subcommand handlers for the gateway CLI, keeping the entrypoint minimal.
No top-level side effects; safe to import in tests.

External Dependencies
---------------------
- ``httpx`` through :class:`StreamingDispatcher` when a request is executed.

Timeout Strategy
----------------
- Connect and idle timeouts come from ``get_timeout_config()`` inside the
  dispatcher; no numeric timeouts are introduced here.

Fallback & Error Semantics
--------------------------
- Dry-run (the default) performs no network I/O: it resolves the model,
  validates the tunables and reports where the credential would come from.
- Executed requests print deltas to stdout as they arrive. A terminal error
  frame is printed as JSON to stderr and yields exit code ``1``; argument
  problems yield ``2``; Ctrl-C cancels the stream and yields ``130``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from ...base.credentials import CredentialResolver
from ...base.errors import ErrorClassifier, GatewayError
from ...base.http import ClientFactory
from ...base.logging import LogContext, get_logger, normalized_log_event
from ...base.models import ChatMessage, Done, ErrorEvent, GenerationParameters, ModelConfiguration, TextDelta
from ...base.registry import ProviderRegistry, get_default_registry
from ...base.streaming import StreamController, StreamingDispatcher
from ...base.validation import ParameterValidator
from ...config import get_credential_store

_PREVIEW_CHARS = 64


def params_from_args(args: argparse.Namespace) -> GenerationParameters:
    """Build :class:`GenerationParameters` from parsed tunable flags."""
    return GenerationParameters(
        **{name: getattr(args, name, None) for name in GenerationParameters.field_names()}
    )


def build_messages(prompt: str, system: Optional[str] = None) -> List[ChatMessage]:
    """Return ``[system?, user]`` messages for a one-shot prompt."""
    messages = [ChatMessage("system", system)] if system and system.strip() else []
    messages.append(ChatMessage("user", prompt))
    return messages


def plan_run(
    *,
    provider: str,
    model: Optional[str],
    prompt: Optional[str],
    params: Optional[GenerationParameters] = None,
    endpoint: Optional[str] = None,
    credential_ref: Optional[str] = None,
    registry: Optional[ProviderRegistry] = None,
    store: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Compute a dry-run execution plan without I/O.

    Parameters
    ----------
    provider, model, endpoint, credential_ref:
        Fields of the :class:`ModelConfiguration` that would be dispatched.
    prompt:
        Optional user prompt previewed in the plan output.
    params:
        Tunables to validate against the provider's ranges.
    registry, store:
        Provider table and credential store (defaults: shared catalog and the
        config file's ``credentials`` section).

    Returns
    -------
    Dict[str, Any]
        JSON-serializable summary. ``ok`` is ``False`` when the request would
        fail locally; ``error`` then carries the normalized error.
    """
    registry = registry or get_default_registry()
    params = params or GenerationParameters()
    config = ModelConfiguration(provider, model, endpoint, credential_ref)
    plan: Dict[str, Any] = {
        "provider": provider,
        "model": model,
        "prompt_preview": (f"{prompt[:_PREVIEW_CHARS]}…" if prompt and len(prompt) > _PREVIEW_CHARS else prompt),
        "params": params.as_dict(),
        "endpoint": None,
        "credential_source": None,
        "ok": True,
        "error": None,
    }
    try:
        spec = registry.resolve_model(provider, model)
        plan["model"] = spec.model_id
        plan["wire_format"] = registry.describe(provider).wire_format
        ParameterValidator(registry).validate(provider, params, model_id=spec.model_id)
        target = CredentialResolver(
            registry, store=get_credential_store() if store is None else store
        ).resolve(config)
        plan["endpoint"] = target.endpoint
        plan["credential_source"] = target.source
    except GatewayError as e:
        plan["ok"] = False
        plan["error"] = ErrorClassifier().classify(e).to_dict()
    return plan


def execute(
    config: ModelConfiguration,
    messages: List[ChatMessage],
    params: Optional[GenerationParameters] = None,
    *,
    ndjson: bool = False,
    registry: Optional[ProviderRegistry] = None,
    client_factory: Optional[ClientFactory] = None,
    store: Optional[Dict[str, str]] = None,
) -> int:
    """Dispatch one request and print the stream.

    Returns
    -------
    int
        ``0`` after a ``done`` event, ``1`` after an ``error`` event, ``130``
        when interrupted.

    Side Effects
    ------------
    - Writes deltas (or NDJSON frames) to stdout, errors to stderr.
    - Emits ``cli.start`` / ``cli.finalize`` / ``cli.error`` log events.
    """
    registry = registry or get_default_registry()
    dispatcher = StreamingDispatcher(
        registry,
        resolver=CredentialResolver(registry, store=get_credential_store() if store is None else store),
        client_factory=client_factory,
    )
    controller = StreamController(dispatcher, config, messages, params)
    logger = get_logger("gateway.cli")
    ctx = LogContext(provider=config.provider, model=config.model_id, request_id=dispatcher.ctx.request_id)
    normalized_log_event(logger, "cli.start", ctx, phase="start", attempt=1)

    try:
        for event in controller:
            if ndjson:
                print(json.dumps(event.to_frame(), ensure_ascii=False), flush=True)
            elif isinstance(event, TextDelta):
                sys.stdout.write(event.text)
                sys.stdout.flush()
            elif isinstance(event, Done):
                sys.stdout.write("\n")
            if isinstance(event, ErrorEvent):
                if not ndjson:
                    print(json.dumps(event.to_frame(), ensure_ascii=False), file=sys.stderr)
                normalized_log_event(
                    logger,
                    "cli.error",
                    ctx,
                    phase="finalize",
                    error_code=event.error.kind.value,
                    emitted=dispatcher.metrics.emitted > 0,
                    level=logging.WARNING,
                )
                return 1
    except KeyboardInterrupt:
        controller.cancel("interrupted")
        controller.close()
        print(json.dumps({"error": "interrupted"}), file=sys.stderr)
        return 130

    normalized_log_event(
        logger,
        "cli.finalize",
        ctx,
        phase="finalize",
        emitted=dispatcher.metrics.emitted > 0,
        tokens=dispatcher.metrics.tokens,
    )
    return 0


def handle_run(args: argparse.Namespace, *, client_factory: Optional[ClientFactory] = None) -> int:
    """Execute the default ``run`` subcommand (plan or execute).

    Parameters
    ----------
    args: argparse.Namespace
        Parsed CLI arguments for a single chat request.
    client_factory: Optional[ClientFactory]
        httpx client factory injected by tests.
    """
    params = params_from_args(args)
    if not args.execute:
        plan = plan_run(
            provider=args.provider,
            model=args.model,
            prompt=args.prompt,
            params=params,
            endpoint=args.endpoint,
            credential_ref=args.credential_ref,
        )
        print(json.dumps(plan, ensure_ascii=False))
        return 0
    if not args.prompt or not args.prompt.strip():
        print(json.dumps({"error": "--prompt is required with --execute"}), file=sys.stderr)
        return 2
    config = ModelConfiguration(args.provider, args.model, args.endpoint, args.credential_ref)
    return execute(
        config,
        build_messages(args.prompt, args.system),
        params,
        ndjson=args.ndjson,
        client_factory=client_factory,
    )


def handle_providers(args: argparse.Namespace) -> int:
    """Print the provider catalog as JSON."""
    registry = get_default_registry()
    out = [
        {
            "id": d.provider_id,
            "name": d.display_name,
            "wireFormat": d.wire_format,
            "defaultEndpoint": d.default_endpoint,
            "defaultModel": d.default_model.model_id if d.default_model else None,
        }
        for d in registry
    ]
    print(json.dumps({"providers": out}))
    return 0


def handle_models(args: argparse.Namespace) -> int:
    """Print the models of ``--provider`` as JSON; ``2`` for an unknown provider."""
    try:
        descriptor = get_default_registry().describe(args.provider)
    except GatewayError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        return 2
    print(json.dumps({"provider": descriptor.provider_id, "models": [m.to_dict() for m in descriptor.models]}))
    return 0


__all__ = [
    "params_from_args",
    "build_messages",
    "plan_run",
    "execute",
    "handle_run",
    "handle_providers",
    "handle_models",
]
