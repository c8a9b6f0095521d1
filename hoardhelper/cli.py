#!/usr/bin/env python3
"""
HoardHelper - media library organiser

Command-line entry point: preview proposed paths, classify torrent
listings, export locally, upload to a WebDAV library or watch the
connection to it.
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from .detection import detect_media_type, get_files_with_subtitle_info, validate_torrent_files
from .exporter import export_file
from .formatter import export_path
from .history import UploadHistory
from .models import FileStatus, TorrentFile
from .settings import SettingsManager
from .uploads import UploadQueue
from .webdav import WebDAVClient, WebDAVError, monitor_connection


def print_proposal(old_name: str, new_path: str | None, status: FileStatus) -> None:
    """Print one queued file."""
    print(f"{old_name}")
    if status.is_error:
        print(f"  [ERROR] {status.label()}")
    else:
        print(f"  -> {new_path}")


def load_torrent_listing(path: Path) -> list[TorrentFile]:
    """
    Read a torrent listing from JSON.

    Accepts either a bare list of file objects or an object with a
    ``files`` key, as returned by debrid services.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("files", [])
    if not isinstance(data, list):
        raise ValueError("Listing must be a list of files")
    return validate_torrent_files(TorrentFile.from_dict(item) for item in data)


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------

def cmd_parse(args: argparse.Namespace) -> int:
    settings = SettingsManager(args.settings).load()
    queue = UploadQueue(None, settings)
    entries = queue.add_paths(args.paths)

    if args.json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
    else:
        for entry in entries:
            print_proposal(entry.original_name, entry.proposed, entry.status)

    return 0 if all(e.valid for e in entries) else 1


def cmd_classify(args: argparse.Namespace) -> int:
    try:
        files = load_torrent_listing(args.listing)
    except (OSError, ValueError, KeyError, TypeError) as e:
        print(f"Error: {e}")
        return 1

    result = detect_media_type(files)
    videos = get_files_with_subtitle_info(result.video_files, result.subtitle_files)

    if args.json:
        print(json.dumps({
            "mediaType": result.media_type,
            "videoFiles": [
                {"id": v.id, "path": v.path, "bytes": v.bytes,
                 "subtitleFileIds": v.subtitle_file_ids}
                for v in videos
            ],
            "subtitleFiles": [s.id for s in result.subtitle_files],
            "junkFiles": [j.id for j in result.junk_files],
        }, indent=2))
        return 0

    print(f"Media type: {result.media_type}")
    print(f"Video files: {len(videos)}")
    for video in videos:
        subs = ", ".join(str(i) for i in video.subtitle_file_ids) or "none"
        print(f"  [{video.id}] {video.path} (subtitles: {subs})")
    print(f"Subtitle files: {len(result.subtitle_files)}")
    print(f"Junk files: {len(result.junk_files)}")
    for junk in result.junk_files:
        print(f"  [{junk.id}] {junk.path}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    settings = SettingsManager(args.settings).load()
    queue = UploadQueue(None, settings)
    error_count = 0

    for entry in queue.add_paths(args.paths):
        if not entry.valid:
            print_proposal(entry.original_name, None, entry.status)
            error_count += 1
            continue
        destination = export_path(entry.parsed, args.export_dir)
        if args.dry_run:
            print_proposal(entry.original_name, str(destination), entry.status)
            continue
        result = export_file(entry.full_path, destination)
        if result.success:
            print_proposal(entry.original_name, str(destination), FileStatus.secured())
        else:
            print_proposal(entry.original_name, None, FileStatus.failed(result.error or "Export failed"))
            error_count += 1

    return 0 if error_count == 0 else 1


def cmd_upload(args: argparse.Namespace) -> int:
    settings = SettingsManager(args.settings).load()

    if args.dry_run:
        queue = UploadQueue(None, settings)
        entries = queue.add_paths(args.paths)
        print("[DRY RUN - nothing will be uploaded]\n")
        for entry in entries:
            print_proposal(entry.original_name, entry.proposed, entry.status)
        return 0 if all(e.valid for e in entries) else 1

    try:
        client = WebDAVClient.from_settings(settings)
    except WebDAVError as e:
        print(f"Error: {e}")
        return 1

    history = UploadHistory(args.history_db)
    try:
        queue = UploadQueue(client, settings, history)
        queue.add_paths(args.paths)
        for history_id in args.retry or []:
            if queue.retry(history_id) is None:
                print(f"Unknown history entry: {history_id}")

        entries = list(queue.entries)
        invalid = [e for e in entries if not e.valid]
        results = queue.upload_all()

        for entry in entries:
            print_proposal(entry.original_name, entry.proposed, entry.status)
    finally:
        history.close()

    uploaded = sum(1 for r in results if r.success)
    error_count = len(results) - uploaded + len(invalid)
    print("-" * 50)
    print(f"Uploaded: {uploaded} | Errors: {error_count}")
    return 0 if error_count == 0 else 1


def cmd_status(args: argparse.Namespace) -> int:
    settings = SettingsManager(args.settings).load()
    try:
        client = WebDAVClient.from_settings(settings)
    except WebDAVError as e:
        print(f"Error: {e}")
        return 1

    def report(online: bool, error: str | None) -> None:
        if online:
            print(f"Connected to {client.base_url}")
        else:
            print(f"Offline: {error}")

    checks = args.count if args.watch else 1
    try:
        online = monitor_connection(
            client, settings.connection_check_interval, report, checks
        )
    except KeyboardInterrupt:
        return 0
    return 0 if online else 1


def cmd_history(args: argparse.Namespace) -> int:
    history = UploadHistory(args.history_db)
    try:
        items = history.failed() if args.failed else history.all(args.limit)
    finally:
        history.close()

    for item in items:
        marker = "OK" if item.upload_status == "success" else "FAILED"
        retry = " (retry)" if item.is_retry else ""
        print(f"{item.id}  {item.uploaded_at}  [{marker}]{retry}  {item.original_name}")
        if item.error_message:
            print(f"    {item.error_message}")
    return 0


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hoardhelper",
        description="Organise media release files into a library layout."
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed debug information"
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Settings file (default: platform app-data directory)"
    )
    parser.add_argument(
        "--history-db",
        type=Path,
        default=None,
        help="Upload history database (default: platform app-data directory)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Show the proposed library path for files")
    p.add_argument("paths", nargs="+", help="Files to parse")
    p.add_argument("--json", action="store_true", help="Print JSON")
    p.set_defaults(func=cmd_parse)

    p = sub.add_parser("classify", help="Classify a torrent file listing")
    p.add_argument("listing", type=Path, help="JSON file with the listing")
    p.add_argument("--json", action="store_true", help="Print JSON")
    p.set_defaults(func=cmd_classify)

    p = sub.add_parser("export", help="Copy files into a local library tree")
    p.add_argument("paths", nargs="+", help="Files to export")
    p.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Local library root (default: ./export)"
    )
    p.add_argument("--dry-run", action="store_true", help="Only show destinations")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("upload", help="Upload files to the WebDAV library")
    p.add_argument("paths", nargs="*", help="Files to upload")
    p.add_argument(
        "--retry",
        action="append",
        metavar="HISTORY_ID",
        help="Retry a failed upload from the history (repeatable)"
    )
    p.add_argument("--dry-run", action="store_true", help="Only show destinations")
    p.set_defaults(func=cmd_upload)

    p = sub.add_parser("status", help="Test the WebDAV connection")
    p.add_argument(
        "--watch",
        action="store_true",
        help="Keep checking every connection_check_interval seconds"
    )
    p.add_argument(
        "--count",
        type=int,
        default=None,
        metavar="N",
        help="Stop watching after N checks"
    )
    p.set_defaults(func=cmd_status)

    p = sub.add_parser("history", help="List recent uploads")
    p.add_argument("--limit", type=int, default=50, metavar="N", help="Entries to show")
    p.add_argument("--failed", action="store_true", help="Only failed uploads")
    p.set_defaults(func=cmd_history)

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parsed_args = build_parser().parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
