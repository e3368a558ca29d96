"""Process entry point: configure logging, wire services, run the host."""

import argparse
import asyncio
import logging
import os
from collections.abc import Sequence

from logrouter import __version__
from logrouter.adapters.logging import install_router_handler
from logrouter.config import build_router, default_config, load_config
from logrouter.core.diagnostics import report
from logrouter.core.errors import ConfigurationError
from logrouter.core.routing import LogRouter
from logrouter.host.container import ServiceContainer
from logrouter.host.hosting import Host
from logrouter.host.services import Greeter, GreeterService
from logrouter.host.worker import Worker

APPLICATION_NAME = "logrouter"
CONFIG_ENV = "LOGROUTER_CONFIG"
ENVIRONMENT_ENV = "LOGROUTER_ENVIRONMENT"
DEFAULT_ENVIRONMENT = "Production"

EXIT_OK = 0
EXIT_HOST_FAILED = 1
EXIT_CONFIGURATION = 2


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=APPLICATION_NAME,
        description="Run the worker host with tag-routed rolling file logs.",
    )
    parser.add_argument(
        "--config",
        default=os.environ.get(CONFIG_ENV),
        help=f"YAML logging configuration (default: ${CONFIG_ENV}, else built-in)",
    )
    parser.add_argument(
        "--environment",
        default=os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT),
        help=f"Hosting environment name (default: ${ENVIRONMENT_ENV} or {DEFAULT_ENVIRONMENT})",
    )
    parser.add_argument(
        "--base-dir",
        default=".",
        help="Directory holding App_Data/logs for the built-in configuration",
    )
    parser.add_argument(
        "--exit-when-idle",
        action="store_true",
        help="Stop once the background services have finished",
    )
    return parser.parse_args(argv)


def create_container(router: LogRouter) -> ServiceContainer:
    """Register the router, the greeter and the worker."""
    container = ServiceContainer()
    container.add_instance(LogRouter, router)
    container.add_singleton(
        GreeterService,
        lambda c: Greeter(c.resolve(LogRouter).for_type(Greeter)),
    )
    container.add_hosted_service(
        lambda c: Worker(
            c.resolve(LogRouter).for_type(Worker),
            c.resolve(GreeterService),
        )
    )
    return container


def run(router: LogRouter, environment: str, exit_when_idle: bool = False) -> int:
    """Run the host against a configured router, then close the router.

    The router is flushed and closed on every path out of this function.
    """
    root = logging.getLogger()
    previous_level = root.level
    handler = install_router_handler(router, root)
    log = router.for_context(APPLICATION_NAME)
    try:
        log.info("=" * 68)
        log.info(
            "Application [{application}] Starts. Version: {version}; "
            "Environment: {environment}. ",
            application=APPLICATION_NAME,
            version=__version__,
            environment=environment,
        )
        container = create_container(router)
        host = Host(
            container,
            log.for_type(Host),
            environment=environment,
            stop_when_idle=exit_when_idle,
        )
        asyncio.run(host.run())
        return EXIT_OK
    except Exception as e:
        log.fatal("Host terminated unexpectedly", exception=e)
        return EXIT_HOST_FAILED
    finally:
        root.removeHandler(handler)
        root.setLevel(previous_level)
        router.close_and_flush()


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args.config) if args.config else default_config(args.base_dir)
        router = build_router(config)
    except ConfigurationError as e:
        report(e)
        return EXIT_CONFIGURATION
    return run(router, args.environment, exit_when_idle=args.exit_when_idle)
