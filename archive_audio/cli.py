"""CLI interface: run the server or generate reports and podcasts locally."""

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

from archive_audio.artifacts import list_generated, resolve_audio_dir
from archive_audio.constants import (
    DEFAULT_INVESTIGATION,
    DEFAULT_TARGET_SECONDS,
    VERSION,
)
from archive_audio.errors import InvalidRequestError
from archive_audio.models import (
    Article,
    DocumentInput,
    GenerationProgress,
    GenerationResult,
    PodcastRequest,
    ReportRequest,
)
from archive_audio.personas import get_personas
from archive_audio.podcast import generate_podcast
from archive_audio.report import generate_investigative_report


def _load_json_list(path: str, key: str) -> list[dict]:
    """Read a JSON file holding either a list or {key: [...]}."""
    if not os.path.exists(path):
        print(f"Error: File not found: {path}", file=sys.stderr)
        raise SystemExit(1)
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    if isinstance(data, dict):
        data = data.get(key)
    if not isinstance(data, list):
        print(f"Error: {path} must contain a list of {key}", file=sys.stderr)
        raise SystemExit(1)
    return data


def _print_progress(progress: GenerationProgress) -> None:
    step = f"[{progress.current_step}] " if progress.current_step else ""
    print(f"{step}{progress.status}: {progress.message}")


def _finish(result: GenerationResult, audio_dir: str) -> None:
    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        raise SystemExit(1)
    print(f"Done: {os.path.join(audio_dir, result.audio_file)}")
    if result.title:
        print(f"Title: {result.title}")
    if result.tags:
        print(f"Tags:  {', '.join(result.tags)}")


def cmd_serve(args):
    """Run the HTTP server."""
    import uvicorn

    print(f"Serving on http://{args.host}:{args.port}")
    uvicorn.run("archive_audio.server:app", host=args.host, port=args.port)


def cmd_report(args):
    """Generate an investigative report from a documents JSON file."""
    documents = [DocumentInput.from_dict(d) for d in _load_json_list(args.file, "documents")]
    request = ReportRequest(documents=documents, investigation=args.investigation, target_length_seconds=args.length)
    if args.investigators:
        request.selected_investigators = args.investigators

    audio_dir = resolve_audio_dir()
    print(f"Generating report on {len(documents)} documents (~{args.length}s)...")
    try:
        result = generate_investigative_report(request, on_progress=_print_progress, audio_dir=audio_dir)
    except InvalidRequestError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    _finish(result, audio_dir)


def cmd_podcast(args):
    """Generate a podcast episode from an articles JSON file."""
    articles = [Article.from_dict(a) for a in _load_json_list(args.file, "articles")]
    request = PodcastRequest(articles=articles, target_length_seconds=args.length)
    if args.hosts:
        request.selected_hosts = args.hosts

    audio_dir = resolve_audio_dir()
    print(f"Generating podcast on {len(articles)} articles (~{args.length}s)...")
    try:
        result = generate_podcast(request, on_progress=_print_progress, audio_dir=audio_dir)
    except InvalidRequestError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    _finish(result, audio_dir)


def cmd_personas(args):
    """List available personas."""
    filter_str = args.filter.lower() if args.filter else None
    personas = list(get_personas().values())
    if filter_str:
        personas = [p for p in personas if filter_str in p.key.lower() or filter_str in p.name.lower()]
    if not personas:
        print("No matching personas found.")
        return
    print("Available personas:")
    for p in personas:
        print(f"  {p.key:<12} {p.name:<16} {p.alias:<18} voice: {p.voice.name}")


def cmd_list(args):
    """List generated audio files."""
    entries = list_generated()
    if not entries:
        print("No generated audio found.")
        return
    print("Generated audio:")
    for entry in entries:
        title = entry["title"] or "(untitled)"
        print(f"  {entry['file']:<22} {entry['size'] // 1024:>6} KB  {title}")


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="archive-audio",
        description="Archive Audio: two-voice investigative reports and podcasts from documents",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=cmd_serve)

    # report
    report_parser = subparsers.add_parser("report", help="Generate an investigative report")
    report_parser.add_argument("file", help="JSON file with a list of documents")
    report_parser.add_argument("--investigation", default=DEFAULT_INVESTIGATION, help="Investigation title")
    report_parser.add_argument("--investigators", nargs=2, metavar="KEY", help="Two persona keys")
    report_parser.add_argument("--length", type=int, default=DEFAULT_TARGET_SECONDS, help="Target length in seconds")
    report_parser.set_defaults(func=cmd_report)

    # podcast
    podcast_parser = subparsers.add_parser("podcast", help="Generate a podcast episode")
    podcast_parser.add_argument("file", help="JSON file with a list of articles")
    podcast_parser.add_argument("--hosts", nargs=2, metavar="KEY", help="Two persona keys")
    podcast_parser.add_argument("--length", type=int, default=DEFAULT_TARGET_SECONDS, help="Target length in seconds")
    podcast_parser.set_defaults(func=cmd_podcast)

    # personas
    personas_parser = subparsers.add_parser("personas", help="List available personas")
    personas_parser.add_argument("--filter", help="Filter personas by substring")
    personas_parser.set_defaults(func=cmd_personas)

    # list
    list_parser = subparsers.add_parser("list", help="List generated audio")
    list_parser.set_defaults(func=cmd_list)

    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    args.func(args)
