#!/usr/bin/env python3
"""
Command-line interface for the Lambda Uploader system.
"""
import argparse
import logging
import sys
from typing import Dict, List, Optional

from lambda_uploader.errors import InvalidFunctionDetailsError
from lambda_uploader.lambda_func.function_creator import LambdaFunctionCreator
from lambda_uploader.lambda_func.function_lister import LambdaFunctionLister
from lambda_uploader.lambda_func.validator import validate_code_settings, validate_configuration_settings
from lambda_uploader.main import LambdaCreatorFactory
from lambda_uploader.models import (
    DEFAULT_MEMORY_SIZE,
    DEFAULT_TIMEOUT,
    TRACING_ACTIVE,
    TRACING_PASS_THROUGH,
    FunctionUploadDetails,
)
from lambda_uploader.packaging.packager import ZipPackager
from lambda_uploader.session import AwsAccountSettings


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def parse_env_vars(values: Optional[List[str]]) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` pairs into a dictionary."""
    env_vars = {}
    for value in values or []:
        key, separator, variable = value.partition("=")
        if not separator or not key:
            raise argparse.ArgumentTypeError(f"Environment variable must be KEY=VALUE, got {value!r}")
        env_vars[key] = variable
    return env_vars


def _add_function_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--function-name",
        required=True,
        help="Name of the Lambda function"
    )
    parser.add_argument(
        "--handler",
        required=True,
        help="Handler of the Lambda function, e.g. app.handler"
    )
    parser.add_argument(
        "--runtime",
        required=True,
        help="Runtime of the Lambda function, e.g. python3.12"
    )
    parser.add_argument(
        "--role-arn",
        required=True,
        help="ARN of the IAM execution role"
    )
    parser.add_argument(
        "--description",
        default="",
        help="Description of the Lambda function"
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT,
        help=f"Timeout for the Lambda function in seconds (default: {DEFAULT_TIMEOUT})"
    )
    parser.add_argument(
        "--memory-size",
        type=int,
        default=DEFAULT_MEMORY_SIZE,
        help=f"Memory size for the Lambda function in MB (default: {DEFAULT_MEMORY_SIZE})"
    )
    parser.add_argument(
        "--env",
        action="append",
        metavar="KEY=VALUE",
        help="Environment variable of the Lambda function (repeatable)"
    )
    parser.add_argument(
        "--tracing-mode",
        choices=[TRACING_PASS_THROUGH, TRACING_ACTIVE],
        default=TRACING_PASS_THROUGH,
        help=f"X-Ray tracing mode (default: {TRACING_PASS_THROUGH})"
    )


def _add_code_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source-dir",
        required=True,
        help="Directory holding the function sources"
    )
    parser.add_argument(
        "--source-file",
        required=True,
        help="File holding the handler, relative to --source-dir"
    )
    parser.add_argument(
        "--s3-bucket",
        required=True,
        help="S3 bucket to upload the function archive to"
    )


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Package, upload and deploy AWS Lambda functions"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Create command
    create_parser = subparsers.add_parser("create", help="Create a new Lambda function")
    _add_code_arguments(create_parser)
    _add_function_arguments(create_parser)

    # Update command
    update_parser = subparsers.add_parser("update", help="Deploy new code to an existing Lambda function")
    _add_code_arguments(update_parser)
    _add_function_arguments(update_parser)
    update_parser.add_argument(
        "--code-only",
        action="store_true",
        help="Only update the code, keep the current configuration"
    )

    # Update configuration command
    config_parser = subparsers.add_parser(
        "update-config",
        help="Replace the configuration of an existing Lambda function"
    )
    _add_function_arguments(config_parser)

    subparsers.add_parser("list", help="List Lambda functions")

    # General options
    parser.add_argument(
        "--profile",
        help="AWS profile to use"
    )
    parser.add_argument(
        "--region",
        help="AWS region to use"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args(args)


def function_details_from_args(args: argparse.Namespace) -> FunctionUploadDetails:
    return FunctionUploadDetails(
        name=args.function_name,
        handler=args.handler,
        runtime=args.runtime,
        role_arn=args.role_arn,
        description=args.description,
        timeout=args.timeout,
        memory_size=args.memory_size,
        env_vars=parse_env_vars(args.env),
        tracing_mode=args.tracing_mode,
    )


def deploy_command(args: argparse.Namespace, account_settings: AwsAccountSettings) -> int:
    """Handle the create and update commands."""
    logger = logging.getLogger("lambda_uploader.cli")

    packager = ZipPackager()
    try:
        details = function_details_from_args(args)
        validate_configuration_settings(details)
        validate_code_settings(details, args.s3_bucket, packager)
    except (InvalidFunctionDetailsError, argparse.ArgumentTypeError) as e:
        logger.error(f"Validation error: {e}")
        return 1

    creator = LambdaCreatorFactory.create(account_settings, packager)
    try:
        if args.command == "create":
            function = creator.create_lambda(args.source_dir, args.source_file, details, args.s3_bucket).result()
            logger.info(f"Successfully created Lambda function: {function.arn}")
        else:
            creator.update_lambda(
                args.source_dir,
                args.source_file,
                details,
                args.s3_bucket,
                replace_configuration=not args.code_only
            ).result()
            logger.info(f"Successfully updated Lambda function: {details.name}")
    except Exception as e:
        logger.error(f"Failed to deploy Lambda function: {e}", exc_info=True)
        return 1

    return 0


def update_config_command(args: argparse.Namespace, account_settings: AwsAccountSettings) -> int:
    """Handle the update-config command."""
    logger = logging.getLogger("lambda_uploader.cli")

    try:
        details = function_details_from_args(args)
        validate_configuration_settings(details)
    except (InvalidFunctionDetailsError, argparse.ArgumentTypeError) as e:
        logger.error(f"Validation error: {e}")
        return 1

    function_creator = LambdaFunctionCreator(account_settings.client("lambda"), account_settings)
    try:
        function_creator.update(details).result()
        logger.info(f"Successfully updated configuration of Lambda function: {details.name}")
    except Exception as e:
        logger.error(f"Failed to update Lambda function configuration: {e}", exc_info=True)
        return 1

    return 0


def list_command(account_settings: AwsAccountSettings) -> int:
    """Handle the list command."""
    logger = logging.getLogger("lambda_uploader.cli")

    lister = LambdaFunctionLister(account_settings.client("lambda"), account_settings)
    try:
        for function in lister.iter_functions():
            print(f"{function.name}\t{function.runtime}\t{function.arn}")
    except Exception as e:
        logger.error(f"Failed to list Lambda functions: {e}")
        return 1

    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parsed_args = parse_args(args)
    setup_logging(parsed_args.verbose)

    if not parsed_args.command:
        print("No command specified. Use --help for usage information.")
        return 1

    account_settings = AwsAccountSettings(profile_name=parsed_args.profile, region_name=parsed_args.region)

    if parsed_args.command in ("create", "update"):
        return deploy_command(parsed_args, account_settings)
    elif parsed_args.command == "update-config":
        return update_config_command(parsed_args, account_settings)
    else:
        return list_command(account_settings)


if __name__ == "__main__":
    sys.exit(main())
