"""
Command line front end for Dialog Extractor.

    dialog-extractor local shot.png --lang jpn --output shot.txt
    dialog-extractor cloud shot.png --credentials azurevision.json
    dialog-extractor fetch-tessdata jpn eng --dest tessdata
"""

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from . import __version__
from .core.config import get_config
from .core.errors import DialogExtractorError
from .core.extractor import DialogExtractor
from .ocr.tessdata import TessdataInstaller
from .utils.logger import setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dialog-extractor",
        description="Extract text from dialog screenshots with Tesseract or Azure Vision"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file-dir", help="Also write logs to files in this directory")

    subparsers = parser.add_subparsers(dest="command", required=True)

    local = subparsers.add_parser("local", help="Recognize an image with Tesseract")
    local.add_argument("image", help="Image file to recognize")
    local.add_argument("--lang", help="Tesseract language code(s), e.g. jpn or jpn+eng")
    local.add_argument("--tessdata", help="tessdata folder")
    local.add_argument("--tesseract-cmd", help="Path to the tesseract executable")
    local.add_argument("--strip-spaces", action="store_true",
                       help="Remove spaces between recognized glyphs")
    local.add_argument("--output", "-o", help="Save the text to this file instead of printing it")

    cloud = subparsers.add_parser("cloud", help="Recognize an image with Azure Vision")
    cloud.add_argument("image", help="Image file to recognize")
    cloud.add_argument("--credentials", help="JSON file with Endpoint and ApiKey")
    cloud.add_argument("--lang", help="Language hint for the service (default: ja)")
    cloud.add_argument("--timeout", type=float, help="Seconds to wait for the result")
    cloud.add_argument("--no-join", action="store_true",
                       help="Keep line breaks after Japanese continuations")
    cloud.add_argument("--output", "-o", help="Save the text to this file instead of printing it")

    fetch = subparsers.add_parser("fetch-tessdata", help="Download Tesseract language models")
    fetch.add_argument("languages", nargs="+", help="Language codes, e.g. jpn eng")
    fetch.add_argument("--dest", help="tessdata folder")

    return parser


def _apply_overrides(config, args):
    """Return a copy of ``config`` with command line options applied."""
    overrides = {}
    if getattr(args, "tessdata", None):
        overrides["tessdata_dir"] = args.tessdata
    if getattr(args, "tesseract_cmd", None):
        overrides["tesseract_cmd"] = args.tesseract_cmd
    if getattr(args, "strip_spaces", False):
        overrides["strip_spaces"] = True
    if getattr(args, "credentials", None):
        overrides["credentials_file"] = args.credentials
    if getattr(args, "timeout", None) is not None:
        overrides["poll_timeout"] = args.timeout
    if getattr(args, "no_join", False):
        overrides["join_dialog_lines"] = False
    if getattr(args, "lang", None):
        key = "local_language" if args.command == "local" else "cloud_language"
        overrides[key] = args.lang
    return replace(config, **overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = _apply_overrides(get_config(), args)
    logger = setup_logger(
        level=args.log_level or config.log_level,
        log_to_file=bool(args.log_file_dir) or config.log_to_file,
        log_dir=args.log_file_dir or config.log_dir,
    )

    try:
        if args.command == "fetch-tessdata":
            installer = TessdataInstaller()
            try:
                ok = installer.ensure(args.languages, args.dest or config.tessdata_dir)
            finally:
                installer.close()
            if not ok:
                print("Failed to download tessdata", file=sys.stderr)
                return 1
            return 0

        extractor = DialogExtractor(config)
        if args.command == "local":
            result = extractor.extract_local(args.image)
        else:
            result = extractor.extract_cloud(args.image)

        if args.output:
            extractor.save_text(args.output)
        else:
            print(result.text)
        return 0

    except (DialogExtractorError, OSError, ValueError) as e:
        logger.debug("Extraction failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
