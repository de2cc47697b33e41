import argparse
import json
import logging
import os
import sys

from linker.link_service import LinkService
from settings.link_settings import SETTINGS_FILENAME, load_settings


def exception_hook(exctype, value, traceback):
    logging.error("Unhandled exception", exc_info=(exctype, value, traceback))
    sys.__excepthook__(exctype, value, traceback)
sys.excepthook = exception_hook


def build_parser():
    parser = argparse.ArgumentParser(description="Find linkable phrases in text against a Markdown vault.")
    parser.add_argument("vault", help="Vault directory containing Markdown notes")
    parser.add_argument("--text", required=True, help="Text to scan")
    parser.add_argument("--offset", type=int, help="Resolve the phrase under this character offset instead of highlighting")
    parser.add_argument("--settings", help="Settings JSON file (default: <vault>/%s)" % SETTINGS_FILENAME)
    parser.add_argument("--active", help="Document id of the note being edited")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def run(args):
    settings_path = args.settings or os.path.join(args.vault, SETTINGS_FILENAME)
    service = LinkService(args.vault, load_settings(settings_path))

    if args.offset is None:
        spans = service.highlight(args.text)
        return {
            "spans": [
                {"phrase": s.phrase, "category": s.category.value, "start": s.start, "end": s.end}
                for s in spans
            ]
        }

    match = service.resolve_at(args.text, args.offset)
    if match is None:
        return {"match": None}
    suggestions = service.suggestions_for(match.phrase, args.active)
    sections = {
        category.value: [{"label": row.label, "link": row.link_text} for row in rows]
        for category, rows in suggestions.sections()
    }
    current = suggestions.current_heading
    return {
        "match": {
            "phrase": match.phrase,
            "category": match.category.value,
            "start": match.start,
            "end": match.end,
            "words": match.word_count,
        },
        "current_heading": current.link_text if current else None,
        "suggestions": sections,
    }


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(json.dumps(run(args), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
