#!/usr/bin/env python3
"""
Run voice commands against a fresh form and print the result as JSON.

Transcripts are applied in order, then each audio file goes through the
configured transcriber (ElevenLabs when a key is set, otherwise the browser
fallback, which expects a text/plain transcript).

Usage:
    python -m scripts.voice_command "create a contact form" "add a name field and an email field"
    python -m scripts.voice_command --audio request.webm
    python -m scripts.voice_command --audio said.txt --mime text/plain --verbose
"""
import argparse
import asyncio
import json
import mimetypes
import sys
from functools import partial
from pathlib import Path

from app.core.config import settings
from app.core.errors import VoiceFormError
from app.core.form_store import FormDocumentStore
from app.core.interpreter import interpret_transcript
from app.core.logging import configure_logging
from app.core.voice_session import BufferedAudioCapture, VoiceSessionController
from app.services.speech import build_transcriber


def _mime_for(path: Path, override: str | None) -> str:
    if override:
        return override
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "audio/webm"


async def run(
    transcripts: list[str],
    audio_files: list[Path],
    mime: str | None,
    *,
    loose: bool = False,
) -> FormDocumentStore:
    store = FormDocumentStore()
    voice = VoiceSessionController(
        store,
        build_transcriber(settings),
        interpreter=partial(interpret_transcript, loose_clauses=loose),
        feedback=False,
    )

    for text in transcripts:
        delta = voice.apply_transcript(text)
        print(f"> {text}  (+{len(delta.added)} ~{len(delta.updated)} -{len(delta.removed)})", file=sys.stderr)

    for path in audio_files:
        outcome = await voice.process(BufferedAudioCapture(path.read_bytes(), _mime_for(path, mime)))
        print(f"> [{path.name}] {outcome.transcript!r}: {outcome.message}", file=sys.stderr)

    return store


def main():
    parser = argparse.ArgumentParser(description="Apply voice commands to an empty form")
    parser.add_argument("transcripts", nargs="*", help="Commands to apply, in order")
    parser.add_argument("--audio", type=Path, action="append", default=[], help="Audio file to transcribe (repeatable)")
    parser.add_argument("--mime", default=None, help="Mime type for --audio (default: guessed from extension)")
    parser.add_argument(
        "--loose",
        action="store_true",
        default=settings.LOOSE_CLAUSE_MATCHING,
        help="Any \"called X\" renames the form and \"for X\" in a field phrase sets the description",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else settings.LOG_LEVEL)

    if not args.transcripts and not args.audio:
        parser.error("give at least one transcript or --audio file")

    for path in args.audio:
        if not path.exists():
            print(f"❌ Error: Audio file not found: {path}")
            sys.exit(1)

    try:
        store = asyncio.run(run(args.transcripts, args.audio, args.mime, loose=args.loose))
    except VoiceFormError as e:
        print(f"\n❌ Error: {e}")
        sys.exit(1)

    print(json.dumps(store.document.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    main()
