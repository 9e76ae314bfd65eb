"""Command-line entrypoint for segment-sql."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from segment_sql import __version__

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _add_generation_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("prompt", help="Natural language audience description.")
    parser.add_argument("--schema", default=None, help="Schema id (default: DEFAULT_SCHEMA).")
    parser.add_argument(
        "--use-case",
        default=None,
        help="email-marketing, direct-mail, lookalike or suppression.",
    )
    parser.add_argument("--min-size", type=int, default=None, help="Minimum audience size.")
    parser.add_argument("--max-size", type=int, default=None, help="Maximum audience size.")
    parser.add_argument(
        "--require-email",
        action="store_true",
        help="Require deliverable, opted-in email addresses.",
    )
    parser.add_argument(
        "--require-phone",
        action="store_true",
        help="Require phone numbers.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="segment-sql",
        description=(
            "Turn natural-language audience descriptions into validated, "
            "read-only segment SQL."
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser(
        "config-check",
        help="Validate environment configuration for segment-sql.",
    )
    subparsers.add_parser(
        "healthcheck",
        help="Check query engine connectivity with a read-only session.",
    )
    key_parser = subparsers.add_parser(
        "check-key",
        help="Check an Authorization header value against API_KEYS.",
    )
    key_parser.add_argument("authorization", help='Header value, for example "Bearer <key>".')
    subparsers.add_parser("list-schemas", help="List available semantic schemas.")
    show_parser = subparsers.add_parser("show-schema", help="Print a semantic schema as JSON.")
    show_parser.add_argument("schema_id", help="Schema id, for example sig-v2.")

    prompt_parser = subparsers.add_parser(
        "build-prompt",
        help="Compile the generation prompt without calling the generation service.",
    )
    _add_generation_options(prompt_parser)
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate a segment query and validate it against the schema.",
    )
    _add_generation_options(generate_parser)

    validate_parser = subparsers.add_parser(
        "validate-sql",
        help="Validate a SQL statement for safety and schema conformance.",
    )
    validate_parser.add_argument("sql", help="SQL statement to validate.")
    validate_parser.add_argument("--schema", default=None, help="Schema id.")
    validate_parser.add_argument(
        "--engine",
        action="store_true",
        help="Also ask the query engine to plan the statement.",
    )
    validate_parser.add_argument(
        "--parser",
        action="store_true",
        help="Extract schema references with the SQL parser instead of regexes.",
    )

    preview_parser = subparsers.add_parser(
        "preview-sql",
        help="Run a row-limited preview of a statement and count its full result.",
    )
    preview_parser.add_argument("sql", help="SQL statement to preview.")
    preview_parser.add_argument(
        "--max-rows",
        type=int,
        default=None,
        help="Maximum rows to return (default: PREVIEW_DEFAULT_ROWS).",
    )
    return parser


def _generation_payload(args: argparse.Namespace) -> dict[str, Any]:
    payload: dict[str, Any] = {"prompt": args.prompt}
    if args.schema:
        payload["schema"] = args.schema
    if args.use_case:
        payload["useCase"] = args.use_case
    constraints: dict[str, Any] = {}
    if args.min_size is not None:
        constraints["minSize"] = args.min_size
    if args.max_size is not None:
        constraints["maxSize"] = args.max_size
    if args.require_email:
        constraints["requireEmail"] = True
    if args.require_phone:
        constraints["requirePhone"] = True
    if constraints:
        payload["constraints"] = constraints
    return payload


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _run(args: argparse.Namespace) -> int:
    from segment_sql.config import load_settings
    from segment_sql.schema.registry import SchemaRegistry

    settings = load_settings()

    if args.command == "config-check":
        llm_key = "***" if settings.llm_api_key else "(not set)"
        print("Configuration loaded successfully:")
        print(f"- QUERY_ENGINE_DSN: {settings.redacted_dsn}")
        print(f"- QUERY_ENGINE_TIMEOUT_SECONDS: {settings.query_engine_timeout_seconds}")
        print(f"- LLM_PROVIDER: {settings.llm_provider}")
        print(f"- {settings.llm_provider.upper()}_API_KEY: {llm_key}")
        print(f"- model: {settings.llm_model}")
        print(f"- SCHEMAS_DIR: {settings.schemas_dir}")
        print(f"- DEFAULT_SCHEMA: {settings.default_schema}")
        print(f"- REFERENCE_STRATEGY: {settings.reference_strategy}")
        print(f"- API_KEYS: {len(settings.api_keys)} configured")
        return 0

    if args.command == "healthcheck":
        from segment_sql.engine import check_engine_health

        settings.validate_engine_requirements()
        result = check_engine_health(
            settings.query_engine_dsn, settings.query_engine_timeout_seconds
        )
        print("Query engine healthcheck succeeded:")
        print(f"- database: {result.current_database}")
        print(f"- user: {result.current_user}")
        print(f"- server_version: {result.server_version}")
        print(f"- transaction_read_only: {result.transaction_read_only}")
        return 0

    if args.command == "check-key":
        from segment_sql.auth import authenticate, credential_store_from_settings

        credential = authenticate(args.authorization, credential_store_from_settings(settings))
        print(f"API key accepted: {credential.key_id}")
        return 0

    registry = SchemaRegistry(settings.schemas_dir)

    if args.command == "list-schemas":
        _print_json([summary.to_dict() for summary in registry.list_schemas()])
        return 0

    if args.command == "show-schema":
        _print_json(registry.get(args.schema_id).to_dict())
        return 0

    if args.command == "build-prompt":
        from segment_sql.models import GenerationRequest, parse_request
        from segment_sql.prompts import compile_prompt

        request = parse_request(GenerationRequest, _generation_payload(args))
        bundle = compile_prompt(request, registry, default_schema=settings.default_schema)
        print(f"- schema: {bundle.schema_id}")
        print(f"- use_case: {bundle.use_case or '(none)'}")
        print("\n--- PROMPT ---")
        print(bundle.prompt)
        return 0

    if args.command == "generate":
        from segment_sql.llm import create_llm_generator
        from segment_sql.models import GenerationRequest, parse_request
        from segment_sql.pipeline import generate_segment

        request = parse_request(GenerationRequest, _generation_payload(args))
        settings.validate_llm_requirements()
        result = generate_segment(
            request,
            registry=registry,
            llm=create_llm_generator(settings),
            settings=settings,
        )
        _print_json(result.to_dict())
        return 0

    if args.command == "validate-sql":
        from segment_sql.models import ValidationRequest, parse_request
        from segment_sql.pipeline import validate_query

        payload: dict[str, Any] = {"sql": args.sql}
        if args.schema:
            payload["schema"] = args.schema
        request = parse_request(ValidationRequest, payload)
        if args.parser:
            settings = settings.model_copy(update={"reference_strategy": "parser"})
        report = validate_query(
            request, registry=registry, settings=settings, with_engine=args.engine
        )
        _print_json(report.to_dict())
        return 0 if report.is_valid else 1

    if args.command == "preview-sql":
        from segment_sql.models import PreviewRequest, parse_request
        from segment_sql.pipeline import preview

        payload = {"sql": args.sql}
        if args.max_rows is not None:
            payload["maxRows"] = args.max_rows
        result = preview(parse_request(PreviewRequest, payload), settings=settings)
        _print_json(result.to_dict())
        return 0

    print(f"Command '{args.command}' is not implemented.", file=sys.stderr)
    return 2


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        from segment_sql.config import ConfigError
        from segment_sql.errors import SegmentSQLError
    except ModuleNotFoundError:
        print(
            "Runtime dependencies are missing. "
            "Install project dependencies first (pip install -e .).",
            file=sys.stderr,
        )
        return 2

    try:
        return _run(args)
    except ConfigError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return 2
    except SegmentSQLError as exc:
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
