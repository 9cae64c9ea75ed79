"""Command-line front end for the ask pipeline.

Reads the document from a local file, asks the question, and writes the
answer to a local file.

Run with:
    docqa "What does this do?" README.md answers/readme.md --model gpt-4o-mini
"""
from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path

import structlog

from docqa.config import Settings, settings
from docqa.errors import DocQAError, DocumentIOError, MissingCredentialError
from docqa.llm.client import CompletionClient, build_completion_client
from docqa.models.submission import Submission, UploadedDocument
from docqa.pipeline.orchestrator import AskPipeline

logger = structlog.get_logger(__name__)

_EXTENSION_MEDIA_TYPES = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".txt": "text/plain",
}


def media_type_for(path: Path) -> str:
    """Declared media type for a local file, derived from its extension."""
    ext = path.suffix.lower()
    if ext in _EXTENSION_MEDIA_TYPES:
        return _EXTENSION_MEDIA_TYPES[ext]
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


def read_document(path: Path, media_type: str | None = None) -> UploadedDocument:
    try:
        content = path.read_bytes()
    except FileNotFoundError as exc:
        raise DocumentIOError(f"input file not found: {path}") from exc
    except OSError as exc:
        raise DocumentIOError(f"error reading input file: {exc}") from exc
    return UploadedDocument(
        filename=path.name,
        media_type=media_type or media_type_for(path),
        content=content,
    )


def write_answer(path: Path, answer: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(answer, encoding="utf-8")
    except OSError as exc:
        raise DocumentIOError(f"error writing output file: {exc}") from exc


async def ask_file(
    client: CompletionClient,
    question: str,
    input_file: Path,
    output_file: Path,
    model: str | None = None,
    media_type: str | None = None,
    config: Settings = settings,
) -> str:
    """Run the pipeline over local files and return the answer written."""
    pipeline = AskPipeline(
        client,
        max_upload_bytes=config.max_upload_bytes,
        default_model=config.default_model,
    )
    document = read_document(input_file, media_type)
    result = await pipeline.run(
        Submission(question=question, document=document, model=model)
    )
    write_answer(output_file, result.answer)
    logger.info("cli_answer_written", output_file=str(output_file), chars=len(result.answer))
    return result.answer


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="docqa",
        description="Ask a language model a question about a Markdown or text file.",
    )
    ap.add_argument("question", help="The question to ask about the document")
    ap.add_argument("input_file", type=Path, help="Path to the Markdown/text document (context)")
    ap.add_argument("output_file", type=Path, help="Path to write the answer to")
    ap.add_argument(
        "-m", "--model",
        default=settings.default_model,
        help=f"Model to use (default: {settings.default_model})",
    )
    ap.add_argument(
        "--media-type",
        default=None,
        help="Declared media type of the document (default: derived from the file extension)",
    )
    return ap


async def _run(args: argparse.Namespace) -> None:
    client = build_completion_client(settings)
    try:
        await ask_file(
            client,
            args.question,
            args.input_file,
            args.output_file,
            model=args.model,
            media_type=args.media_type,
        )
    finally:
        await client.aclose()


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    return structlog.PrintLogger(sys.stderr)


def configure_logging() -> None:
    """Send log events to stderr so stdout carries only the result line."""
    structlog.configure(logger_factory=_stderr_logger)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    try:
        asyncio.run(_run(args))
    except MissingCredentialError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print("Hint: set it in the environment or in a .env file at the project root.", file=sys.stderr)
        return 1
    except DocQAError as exc:
        logger.error("cli_failed", kind=exc.kind, error=exc.message)
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    print(f"Answer saved to {args.output_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
