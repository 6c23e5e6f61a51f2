"""Run a text-mode mock interview or viva from the terminal.

Without ``--base-url`` the FastAPI app is served in-process through an ASGI
transport, so only the model API key is required.
"""
from __future__ import annotations

import argparse
import asyncio
from typing import List, Optional

import httpx

from feedback import FeedbackGenerator, FeedbackReport
from interview_setup import (
    PRACTICE_TYPES,
    JobInterviewConfig,
    PracticeConfig,
    SessionConfig,
    SubjectiveVivaConfig,
    UserProfile,
    HandoffError,
    decode_config_param,
    practice_questions,
)
from response_gateway import ResponseGateway
from session_controller import SessionController

LOCAL_BASE_URL = "http://kiwi.local"
QUIT_WORDS = {"/quit", "/exit"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Practice an interview or viva in the terminal.")
    parser.add_argument("--data", help="Percent-encoded session configuration (as passed between screens)")
    parser.add_argument("--base-url", help="Use a running API server instead of the in-process app")
    parser.add_argument("--name", default="", help="How the interviewer should address you")

    job = parser.add_argument_group("job interview")
    job.add_argument("--job-title")
    job.add_argument("--company")
    job.add_argument("--job-description", default="")
    job.add_argument("--skills", default="")
    job.add_argument("--experience-level", default="mid-level")
    job.add_argument("--interview-type", default="technical")

    viva = parser.add_argument_group("subjective viva")
    viva.add_argument("--subject")
    viva.add_argument("--topic")
    viva.add_argument("--subject-level", default="undergraduate")

    practice = parser.add_argument_group("practice round")
    practice.add_argument("--practice", choices=PRACTICE_TYPES, help="Answer the fixed question bank for this type")
    return parser


def config_from_args(args: argparse.Namespace) -> SessionConfig:
    if args.data:
        try:
            return decode_config_param(args.data)
        except HandoffError as exc:
            raise SystemExit(f"Invalid --data: {exc}") from exc
    profile = UserProfile(name=args.name) if args.name else None
    if args.practice:
        return PracticeConfig(practice_type=args.practice, user_profile=profile)
    if args.subject:
        return SubjectiveVivaConfig(
            subject=args.subject,
            topic=args.topic or args.subject,
            subject_level=args.subject_level,
            user_profile=profile,
        )
    if args.job_title:
        return JobInterviewConfig(
            job_title=args.job_title,
            company=args.company,
            job_description=args.job_description,
            required_skills=args.skills,
            experience_level=args.experience_level,
            interview_type=args.interview_type,
            user_profile=profile,
        )
    raise SystemExit("Provide --data, --job-title, --subject or --practice")


def _client(base_url: Optional[str]) -> httpx.AsyncClient:
    if base_url:
        return httpx.AsyncClient(base_url=base_url)
    from api_server import app  # binds the configured model routes on import

    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=LOCAL_BASE_URL)


def render_report(report: FeedbackReport) -> str:
    lines: List[str] = [f"Overall score: {report.overall_score}%", "", "Strengths:"]
    lines += [f"  - {item}" for item in report.strengths]
    lines += ["", "Areas to improve:"]
    lines += [f"  - {item}" for item in report.improvements]
    lines += ["", report.detailed_feedback]
    return "\n".join(lines)


def render_sample_answers(config: PracticeConfig) -> str:
    lines: List[str] = ["Sample answers:"]
    for item in practice_questions(config.practice_type):
        lines += ["", f"{item.id}. {item.question}", f"   {item.sample_answer}"]
    return "\n".join(lines)


async def run_session(config: SessionConfig, client: httpx.AsyncClient) -> FeedbackReport:
    controller = await SessionController.open(config, ResponseGateway(client))
    print(f"Kiwi: {controller.visible_messages[-1].content}\n")
    try:
        while not controller.is_complete:
            answer = await asyncio.to_thread(input, "You: ")
            if answer.strip().lower() in QUIT_WORDS:
                break
            if not await controller.submit_user_response(answer):
                continue
            print(f"\nKiwi: {controller.visible_messages[-1].content}")
            print(f"[{controller.question_count} of {controller.total_questions} questions]\n")
    finally:
        await controller.close()

    generator = FeedbackGenerator(client)
    return await generator.generate_feedback(controller.transcript, config, session_id=controller.session_id)


async def _main(args: argparse.Namespace) -> None:
    config = config_from_args(args)
    async with _client(args.base_url) as client:
        report = await run_session(config, client)
    print()
    print(render_report(report))
    if isinstance(config, PracticeConfig):
        print()
        print(render_sample_answers(config))


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    asyncio.run(_main(args))


if __name__ == "__main__":
    main()
