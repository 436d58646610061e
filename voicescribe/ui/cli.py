#!/usr/bin/env python3
"""
VoiceScribe terminal recorder.

Records from the default microphone until Enter is pressed (or reads an
existing audio file), uploads it to the gateway with the usual retry loop,
and prints or saves the transcription.
"""

import argparse
import logging
import mimetypes
import sys
from pathlib import Path

from voicescribe.core.config import get_settings
from voicescribe.core.models import RecorderState
from voicescribe.ui.api_client import APIClient
from voicescribe.ui.capture import MicrophoneSource
from voicescribe.ui.session import RecorderSession


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Record audio and transcribe it through the VoiceScribe gateway."
    )
    parser.add_argument(
        "--api-url",
        default=settings.api_base_url,
        help=f"Gateway base URL (default: {settings.api_base_url})",
    )
    parser.add_argument(
        "--file",
        type=Path,
        help="Transcribe an existing audio file instead of recording",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Write the transcription to this path instead of stdout",
    )
    parser.add_argument(
        "--sample-rate",
        type=int,
        default=16_000,
        help="Microphone sample rate in Hz (default: 16000)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    client = APIClient(
        base_url=args.api_url,
        timeout=settings.client_timeout,
        max_attempts=settings.client_max_attempts,
        retry_base_delay=settings.client_retry_base_delay,
    )
    session = RecorderSession(client, MicrophoneSource(sample_rate=args.sample_rate))

    if args.file:
        if not args.file.is_file():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            return 1
        mime_type = mimetypes.guess_type(args.file.name)[0] or "application/octet-stream"
        session.load_recording(args.file.read_bytes(), mime_type, source_name=args.file.name)
    else:
        if not session.start_capture():
            print(session.error, file=sys.stderr)
            return 1
        input("Recording... press Enter to stop. ")
        recording = session.stop_capture()
        print(f"Captured {recording.size if recording else 0} bytes")

    def _show_retry(retry: int, max_attempts: int) -> None:
        print(f"Retry attempt {retry}/{max_attempts}...", file=sys.stderr)

    try:
        session.transcribe(on_retry=_show_retry)
    finally:
        client.close()

    if session.state == RecorderState.failed:
        print(session.error, file=sys.stderr)
        return 1

    artifact = session.download()
    if args.output and artifact is not None:
        args.output.write_bytes(artifact.data)
        print(f"Transcription saved to {args.output}")
    else:
        print(session.transcription)
    return 0


if __name__ == "__main__":
    sys.exit(main())
