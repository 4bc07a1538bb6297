"""Headless wizard CLI: drives one complete run against the backend."""

import argparse
import json
import logging
import mimetypes
import os
import sys

from resume_optimizer.config import Settings
from resume_optimizer.main import build_components
from resume_optimizer.models.state import FlowVariant, Stage
from resume_optimizer.models.task import ResumeFile
from resume_optimizer.services.workflow_engine import WorkflowEngine

logger = logging.getLogger(__name__)


class WizardRunError(Exception):
    """Raised when a stage of a headless run fails."""

    pass


def load_resume(path: str) -> ResumeFile:
    """Read a resume file from disk."""
    if not os.path.isfile(path):
        raise ValueError(f"Resume file not found: {path}")
    content_type = mimetypes.guess_type(path)[0] or "application/pdf"
    with open(path, "rb") as f:
        return ResumeFile(
            filename=os.path.basename(path), content=f.read(), content_type=content_type
        )


def _check(engine: WorkflowEngine, ok: bool) -> None:
    if not ok:
        raise WizardRunError(engine.error or "Stage failed")


def run_wizard(
    engine: WorkflowEngine,
    resume: ResumeFile | None,
    use_existing: bool,
    job_description: str | None = None,
    keywords: str | None = None,
    deselect: list[str] | None = None,
    custom: list[str] | None = None,
    upgrade: bool = False,
) -> str:
    """Run every stage in order and return the download URL."""
    if keywords is not None:
        engine.select_flow(FlowVariant.DIRECT_KEYWORDS)
        _check(engine, engine.submit_direct_keywords(keywords, resume, use_existing))
    else:
        _check(engine, engine.submit_job_description(job_description or "", resume, use_existing))
        _check(engine, engine.load_match_score())
        state = engine.state
        logger.info(
            f"Match rate {state.match_rate} (expected {state.expected_rate}), "
            f"{len(state.missing_keywords)} missing keywords"
        )
        for keyword in deselect or []:
            if keyword in engine.state.selected_keywords:
                engine.toggle_keyword(keyword)
        for keyword in custom or []:
            engine.add_custom_keyword(keyword)
        _check(engine, engine.submit_keyword_selection())

    if engine.stage is Stage.UPGRADE_GATE:
        if upgrade:
            _check(engine, engine.choose_upgrade())
        else:
            _check(engine, engine.continue_with_watermark())

    _check(engine, engine.build_document())
    return engine.state.download_url


def main(argv: list[str] | None = None) -> int:
    """Run one wizard pass from the command line."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Resume Optimizer Wizard CLI")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--resume", help="Path of a resume file to upload")
    source.add_argument(
        "--existing",
        action="store_true",
        help="Use the resume stored for --email",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--job-description", help="Job description text")
    target.add_argument("--job-description-file", help="Path of a job description text file")
    target.add_argument("--keywords", help="Comma separated keywords (skips match scoring)")
    parser.add_argument("--email", default=settings.user_email, help="User email")
    parser.add_argument(
        "--paid",
        action="store_true",
        default=settings.user_is_paid,
        help="Premium user (no upgrade gate)",
    )
    parser.add_argument(
        "--upgrade",
        action="store_true",
        help="Request the premium tier at the upgrade gate instead of a watermark",
    )
    parser.add_argument(
        "--deselect", action="append", default=[], help="Missing keyword to leave out"
    )
    parser.add_argument("--custom", action="append", default=[], help="Extra keyword")
    parser.add_argument("--api-url", default=settings.api_base_url, help="Backend base URL")
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=settings.poll_interval,
        help=f"Seconds between status checks (default: {settings.poll_interval})",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=settings.log_level,
        help="Log level (default: info)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    settings = settings.model_copy(
        update={
            "api_base_url": args.api_url.rstrip("/"),
            "poll_interval": args.poll_interval,
            "user_email": args.email,
            "user_is_paid": args.paid,
        }
    )
    engine, _ = build_components(settings)
    if args.existing:
        engine.update_session(settings.session(has_existing_resume=True))

    job_description = args.job_description
    if args.job_description_file:
        with open(args.job_description_file, encoding="utf-8") as f:
            job_description = f.read()

    try:
        resume = load_resume(args.resume) if args.resume else None
        download_url = run_wizard(
            engine,
            resume,
            args.existing,
            job_description=job_description,
            keywords=args.keywords,
            deselect=args.deselect,
            custom=args.custom,
            upgrade=args.upgrade,
        )
    except (ValueError, WizardRunError) as e:
        logger.error(f"Wizard run failed at stage {engine.stage.value}: {e}")
        return 1

    print(json.dumps({"download_url": download_url, "watermarked": engine.state.watermarked}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
