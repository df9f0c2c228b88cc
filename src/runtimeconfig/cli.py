"""runtime-config CLI.

Usage:
    runtime-config resolve                  # Print resolved config (secrets masked)
    runtime-config resolve --show-secrets   # Print connection strings too
    runtime-config check                    # Exit non-zero if resolution fails
    runtime-config check --strict           # ...or if a required value is empty
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace

from azure.core.exceptions import AzureError

from .config import MergePolicy, PipelineConfig
from .environment import ProcessEnvironment
from .errors import ConfigResolutionError
from .pipeline import ConfigPipeline

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_MISSING = 2


def _build_config(args: argparse.Namespace, env: ProcessEnvironment) -> PipelineConfig:
    config = PipelineConfig.from_env(env.as_dict(), mode_variable=args.mode_variable)
    if args.mode:
        config = replace(config, runtime_mode=args.mode)
    if args.env_file:
        config = replace(config, env_file=args.env_file)
    if args.schema:
        config = replace(config, schema_path=args.schema)
    if args.policy:
        config = replace(config, merge_policy=MergePolicy(args.policy))
    return config


def _run(args: argparse.Namespace):
    env = ProcessEnvironment()
    pipeline = ConfigPipeline(_build_config(args, env), env=env)
    return asyncio.run(pipeline.run()), pipeline


def cmd_resolve(args: argparse.Namespace) -> int:
    """Resolve configuration and print it as JSON."""
    try:
        app_config, _ = _run(args)
    except (ConfigResolutionError, AzureError, ValueError) as e:
        print(f"❌ Configuration could not be resolved: {e}", file=sys.stderr)
        return EXIT_FATAL

    print(json.dumps(app_config.to_dict(redact=not args.show_secrets), indent=2))
    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    """Resolve configuration and report required values that are empty."""
    try:
        _, pipeline = _run(args)
    except (ConfigResolutionError, AzureError, ValueError) as e:
        print(f"❌ Configuration could not be resolved: {e}", file=sys.stderr)
        return EXIT_FATAL

    schema = pipeline.extractor.schema
    missing = [
        path for path in schema.required_fields()
        if not schema.read(path, pipeline.env)
    ]

    if not missing:
        print(f"✅ Configuration resolved ({pipeline.config.runtime_mode})")
        return EXIT_OK

    for path in missing:
        print(f"⚠️  {path} is empty (set {schema.spec(path).env})")
    return EXIT_MISSING if args.strict else EXIT_OK


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="runtime-config",
        description="Resolve application configuration from .env, App Configuration and Key Vault",
    )
    parser.add_argument("--log-level", type=str, default="warning",
                        choices=["debug", "info", "warning", "error"])
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--mode", type=str, default=None,
                        help="Runtime mode (overrides the mode variable)")
    common.add_argument("--mode-variable", type=str, default="APP_ENV",
                        help="Environment variable holding the runtime mode")
    common.add_argument("--env-file", type=str, default=None,
                        help="Local .env file used outside production")
    common.add_argument("--schema", type=str, default=None,
                        help="YAML schema mapping fields to environment variables")
    common.add_argument("--policy", type=str, default=None,
                        choices=[p.value for p in MergePolicy],
                        help="Remote sources to merge in production")

    # resolve
    resolve_parser = subparsers.add_parser(
        "resolve", parents=[common], help="Print the resolved configuration"
    )
    resolve_parser.add_argument("--show-secrets", action="store_true",
                                help="Do not mask connection strings")

    # check
    check_parser = subparsers.add_parser(
        "check", parents=[common], help="Verify configuration resolves"
    )
    check_parser.add_argument("--strict", action="store_true",
                              help="Fail when a required value is empty")

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.command == "resolve":
        sys.exit(cmd_resolve(args))
    elif args.command == "check":
        sys.exit(cmd_check(args))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
