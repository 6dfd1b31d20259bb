"""Builds the run configuration from parsed CLI arguments and the environment."""

import argparse
from pathlib import Path
from typing import Mapping

from pydantic import ValidationError

from fixloop.llm.providers import ANALYSIS_PROVIDER, APPLY_PROVIDER, Provider, get_profile
from fixloop.models import Config


class ConfigurationError(Exception):
    """Raised when the run cannot start because of missing or invalid settings."""


def resolve_test_command(args: argparse.Namespace) -> str:
    """Return --run if given, else the positional arguments joined with spaces."""
    if args.run:
        return args.run.strip()
    return " ".join(args.test_command).strip()


def required_providers(fix: bool) -> list[Provider]:
    """Providers whose credentials must be present for this mode."""
    if fix:
        return [ANALYSIS_PROVIDER, APPLY_PROVIDER]
    return [ANALYSIS_PROVIDER]


def load_config(
    args: argparse.Namespace,
    env: Mapping[str, str],
    cwd: str | Path | None = None,
) -> Config:
    """Validate arguments and credentials and build the Config.

    Args:
        args: Namespace from the CLI parser.
        env: Environment to read API keys from.
        cwd: Working tree root (defaults to the current directory).

    Raises:
        ConfigurationError: If the test command, a required API key or any
            option value is missing or invalid.
    """
    test_command = resolve_test_command(args)
    if not test_command:
        raise ConfigurationError("No test command provided. Pass it as arguments or with --run.")

    api_keys: dict[Provider, str] = {}
    for provider in Provider:
        key = env.get(get_profile(provider).api_key_env, "").strip()
        if key:
            api_keys[provider] = key

    for provider in required_providers(args.fix):
        if provider not in api_keys:
            env_name = get_profile(provider).api_key_env
            raise ConfigurationError(f"{env_name} environment variable is not set")

    root = Path(cwd) if cwd is not None else Path.cwd()

    try:
        return Config(
            test_command=test_command,
            cwd=str(root.resolve()),
            debug=args.debug,
            serialize=args.serialize,
            system_prompt=args.system_prompt,
            fix_prompt=args.fix_prompt,
            hide_ui=args.hide_ui,
            test_file_pattern=args.test_file_pattern,
            source_file_pattern=args.source_file_pattern,
            timeout=args.timeout,
            fix=args.fix,
            auto_apply=args.auto_apply,
            cache=args.cache,
            api_keys=api_keys,
        )
    except ValidationError as exc:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {messages}") from exc
