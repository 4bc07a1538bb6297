"""Main entry point for the wizard API server."""

import argparse
import logging
import sys

import uvicorn
from fastapi import FastAPI

from resume_optimizer.api.app import WizardAPI
from resume_optimizer.config import Settings
from resume_optimizer.services.log_service import configure_logging
from resume_optimizer.services.optimizer_client import OptimizerClient
from resume_optimizer.services.poller import Poller
from resume_optimizer.services.profile_bootstrap import ProfileBootstrap
from resume_optimizer.services.profile_client import ProfileClient
from resume_optimizer.services.task_client import TaskClient
from resume_optimizer.services.workflow_engine import WorkflowEngine

logger = logging.getLogger(__name__)


def build_components(settings: Settings) -> tuple[WorkflowEngine, ProfileBootstrap]:
    """Wire clients, poller, engine and bootstrap from settings."""
    task_client = TaskClient(settings.api_base_url, settings.api_timeout)
    optimizer_client = OptimizerClient(
        settings.api_base_url, settings.api_timeout, task_client=task_client
    )
    profile_client = ProfileClient(settings.api_base_url, settings.api_timeout)
    poller = Poller(
        task_client,
        max_attempts=settings.poll_max_attempts,
        interval=settings.poll_interval,
    )
    session = settings.session()

    engine = WorkflowEngine(task_client, optimizer_client, profile_client, poller, session)
    bootstrap = ProfileBootstrap(profile_client, task_client, poller, session)
    return engine, bootstrap


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create FastAPI application with all dependencies."""
    settings = settings or Settings.from_env()
    engine, bootstrap = build_components(settings)
    return WizardAPI(engine, bootstrap).create_app()


def main(argv: list[str] | None = None) -> int:
    """Run the wizard API server."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Resume Optimizer Wizard API Server")
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Host to bind to (default: {settings.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to bind to (default: {settings.port})",
    )
    parser.add_argument(
        "--api-url",
        default=settings.api_base_url,
        help="Base URL of the resume backend",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=settings.log_level,
        help="Log level (default: info)",
    )
    args = parser.parse_args(argv)

    settings = settings.model_copy(
        update={
            "host": args.host,
            "port": args.port,
            "api_base_url": args.api_url.rstrip("/"),
            "log_level": args.log_level,
        }
    )

    configure_logging(log_dir=settings.log_dir, log_file="wizard.log", level=args.log_level)

    logger.info("Starting resume optimizer wizard API server")
    logger.info(f"Backend: {settings.api_base_url}")

    app = create_app(settings)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)
    return 0


if __name__ == "__main__":
    sys.exit(main())
