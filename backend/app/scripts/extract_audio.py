from __future__ import annotations

import argparse
import json
import sys

from backend.app.dependencies import (
    get_extractor_bridge,
    get_settings,
    reset_cached_dependencies,
)
from backend.app.logging_config import configure_application_logging
from backend.app.services.extractor_bridge import ExtractorBridgeError


def _parse_header(raw_value: str) -> tuple[str, str]:
    name, separator, value = raw_value.partition(":")
    if not separator or not name.strip():
        raise argparse.ArgumentTypeError(f"expected 'Name: value', got {raw_value!r}")
    return name.strip(), value.strip()


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resolve a playable YouTube audio stream URL and its request headers.",
    )
    parser.add_argument("video_id", help="YouTube video id (for example: dQw4w9WgXcQ).")
    parser.add_argument(
        "--data-saver",
        action="store_true",
        help="Cap the requested audio bitrate at 128kbps.",
    )
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        type=_parse_header,
        help="Auth header forwarded to YouTube as 'Name: value'. Repeatable.",
    )
    parser.add_argument(
        "--url-only",
        action="store_true",
        help="Print only the stream URL.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_application_logging(get_settings(), console_stream=sys.stderr)
    bridge = get_extractor_bridge()
    bridge.initialize()
    auth_headers = dict(args.header)

    try:
        if args.url_only:
            print(
                bridge.extract_audio_url(
                    args.video_id,
                    data_saver=args.data_saver,
                    auth_headers=auth_headers,
                )
            )
            return 0
        payload = bridge.extract_audio(
            args.video_id,
            data_saver=args.data_saver,
            auth_headers=auth_headers,
        )
    except ExtractorBridgeError as exc:
        print(f"{exc.code}: {exc.message}", file=sys.stderr)
        return 1
    finally:
        reset_cached_dependencies()

    print(json.dumps({"url": payload.url, "headers": payload.headers}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
