"""
Main CLI module with argument parsing and command execution.

This module provides the main CLI interface including:
- Command line argument parsing
- Command routing to the resource lifecycle service
- Output formatting and error reporting
"""
import argparse
import os
import sys
from typing import Any, Dict, List, Optional

from ibmrp import __version__
from ibmrp.application.resource_service import ResourceLifecycleService
from ibmrp.cli.formatters import collect_sensitive_keys, format_output, mask_sensitive
from ibmrp.config.loader import ConfigurationLoader
from ibmrp.config.manager import ConfigurationManager
from ibmrp.domain.core.exceptions import DomainException
from ibmrp.infrastructure.exceptions import InfrastructureError
from ibmrp.infrastructure.logging.logger import get_logger, setup_logging
from ibmrp.infrastructure.registry.resource_registry import UnsupportedResourceError

FORMATS = ["json", "yaml", "table"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog=os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "ibmrp",
        description="IBM Cloud resource provider - lifecycle of databases and Event Notifications resources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s create ibm_database --file database.yaml
  %(prog)s read ibm_database --id crn:v1:bluemix:public:databases-for-postgresql:us-south:...
  %(prog)s update ibm_en_destination --id <instance_guid>/<destination_id> --file destination.yaml
  %(prog)s validate ibm_database --file database.yaml
        """,
    )

    # Global options
    parser.add_argument("--config", help="Configuration file path")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Override the configured logging level")
    parser.add_argument("--format", choices=FORMATS, default="json", help="Output format")
    parser.add_argument("--output", help="Output file (default: stdout)")
    parser.add_argument("--show-sensitive", action="store_true", help="Do not mask sensitive values")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="action", help="Resource actions")

    create = subparsers.add_parser("create", help="Create a resource from a configuration file")
    create.add_argument("resource_type", help="Resource type, e.g. ibm_database")
    create.add_argument("--file", required=True, help="Resource configuration file (YAML or JSON)")

    update = subparsers.add_parser("update", help="Apply a configuration file to an existing resource")
    update.add_argument("resource_type", help="Resource type")
    update.add_argument("--id", required=True, help="Resource ID")
    update.add_argument("--file", required=True, help="Resource configuration file (YAML or JSON)")

    for action, help_text in (
        ("read", "Refresh a resource from the API"),
        ("delete", "Delete a resource"),
        ("exists", "Check whether a resource still exists"),
        ("import", "Import an existing resource by ID"),
    ):
        sub = subparsers.add_parser(action, help=help_text)
        sub.add_argument("resource_type", help="Resource type")
        sub.add_argument("--id", required=True, help="Resource ID")

    validate = subparsers.add_parser("validate", help="Validate a configuration file without calling any API")
    validate.add_argument("resource_type", help="Resource type")
    validate.add_argument("--file", required=True, help="Resource configuration file (YAML or JSON)")

    subparsers.add_parser("types", help="List the supported resource types")

    return parser.parse_args(argv)


def load_resource_file(file_path: str) -> Dict[str, Any]:
    """Load a resource configuration map, expanding ${VAR:default} references."""
    return ConfigurationLoader().load_from_file(file_path)


def execute_command(args: argparse.Namespace, service: ResourceLifecycleService) -> Any:
    """Execute the requested action and return the data to print."""
    action = args.action
    if action == "types":
        return {"resource_types": service.registry.get_registered_types()}
    if action == "validate":
        errors = service.validate(args.resource_type, load_resource_file(args.file))
        return {"valid": not errors, "errors": errors}
    if action == "create":
        return service.create(args.resource_type, load_resource_file(args.file))
    if action == "update":
        return service.update(args.resource_type, args.id, load_resource_file(args.file))
    if action == "read":
        state = service.read(args.resource_type, args.id)
        return state if state is not None else {"id": args.id, "removed": True}
    if action == "delete":
        service.delete(args.resource_type, args.id)
        return {"id": args.id, "deleted": True}
    if action == "exists":
        return {"id": args.id, "exists": service.exists(args.resource_type, args.id)}
    if action == "import":
        return service.import_resource(args.resource_type, args.id)
    raise ValueError(f"Unknown action: {action}")


def _masked(result: Any, args: argparse.Namespace, service: ResourceLifecycleService) -> Any:
    resource_type = getattr(args, "resource_type", None)
    if args.show_sensitive or not resource_type or not service.registry.is_registered(resource_type):
        return result
    schema = service.registry.get(resource_type).schema
    return mask_sensitive(result, collect_sensitive_keys(schema))


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    if not args.action:
        print("Error: No action specified. Use --help for usage information.", file=sys.stderr)
        return 1

    logger = get_logger(__name__)
    try:
        config_manager = ConfigurationManager(args.config)
        logging_config = config_manager.get_logging_config()
        if args.log_level:
            logging_config = logging_config.model_copy(update={"level": args.log_level})
        setup_logging(logging_config)

        service = ResourceLifecycleService(config_manager)
        result = execute_command(args, service)
    except UnsupportedResourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (DomainException, InfrastructureError) as e:
        logger.error(f"{args.action} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    formatted_output = format_output(_masked(result, args, service), args.format)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(formatted_output)
    else:
        print(formatted_output)

    if args.action == "validate" and not result["valid"]:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
