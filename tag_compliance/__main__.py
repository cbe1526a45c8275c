# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""
Command-line entry point for the tag compliance engine.

Usage:
    python -m tag_compliance validate [--policy PATH]
    python -m tag_compliance generate PATH
    python -m tag_compliance check --policy PATH RESOURCES.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config import settings
from .models import Resource
from .services import (
    ComplianceService,
    PolicyNotFoundError,
    PolicyService,
    PolicyValidationError,
    generate_default_policy,
    write_policy,
)

logger = logging.getLogger(__name__)


def _validate(args: argparse.Namespace) -> int:
    policy = PolicyService(policy_path=args.policy).load_policy()
    print(
        json.dumps(
            {
                "file": str(policy.source),
                "valid": True,
                "version": policy.document.version,
            },
            indent=2,
        )
    )
    return 0


def _generate(args: argparse.Namespace) -> int:
    path = Path(args.path)
    if path.exists() and not args.force:
        logger.error(f"{path} already exists, use --force to overwrite it")
        return 1
    write_policy(generate_default_policy(), path)
    return 0


class ResourceInputError(Exception):
    """Raised when the resources file cannot be turned into resources."""


def load_resources(path: str | Path) -> list[Resource]:
    """
    Read a JSON list of resources.

    Raises:
        ResourceInputError: If the file is unreadable, is not JSON, is not a
            list, or holds an entry that is not a valid resource
    """
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ResourceInputError(f"Error reading resources file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ResourceInputError(f"Invalid JSON in resources file {path}: {e}") from e

    if not isinstance(payload, list):
        raise ResourceInputError(
            f"Resources file {path} must contain a JSON list, got {type(payload).__name__}"
        )

    resources = []
    for index, item in enumerate(payload):
        try:
            resources.append(Resource.model_validate(item))
        except ValidationError as e:
            raise ResourceInputError(f"Invalid resource at index {index} in {path}: {e}") from e
    return resources


def _check(args: argparse.Namespace) -> int:
    policy = PolicyService(policy_path=args.policy).load_policy()
    try:
        resources = load_resources(args.resources)
    except ResourceInputError as e:
        logger.error(str(e))
        return 1

    report = ComplianceService(policy).check_resources(resources)
    print(report.model_dump_json(indent=2))
    return 0 if report.summary.non_compliant_resources == 0 else 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tag_compliance",
        description="Validate tagging policies and check resource tag compliance",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate a policy file")
    validate.add_argument("--policy", help="Policy YAML file (defaults to TAG_POLICY_PATH)")
    validate.set_defaults(handler=_validate)

    generate = subparsers.add_parser("generate", help="Write the default policy")
    generate.add_argument("path", help="Destination YAML file")
    generate.add_argument("--force", action="store_true", help="Overwrite an existing file")
    generate.set_defaults(handler=_generate)

    check = subparsers.add_parser("check", help="Check resources against a policy")
    check.add_argument("--policy", help="Policy YAML file (defaults to TAG_POLICY_PATH)")
    check.add_argument("resources", help="JSON file with a list of resources and their tags")
    check.set_defaults(handler=_check)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    try:
        log_level = settings().log_level
    except ValidationError as e:
        logging.basicConfig(stream=sys.stderr)
        logger.error(f"Invalid configuration: {e}")
        return 1

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    args = build_parser().parse_args(argv)

    try:
        return args.handler(args)
    except (PolicyNotFoundError, PolicyValidationError) as e:
        logger.error(f"Policy error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
