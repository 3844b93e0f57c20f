from __future__ import annotations

import argparse
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from markdoc_ops import config
from markdoc_ops.convert import build_collection, build_question
from markdoc_ops.io_helpers import MissingInputError, question_source_names, require_source_text
from markdoc_ops.models import ElementList
from markdoc_ops.parser import parse_markdown


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="markdoc-ops")
    subparsers = parser.add_subparsers(dest="command", required=True)

    all_parser = subparsers.add_parser(
        "build-all", help="Combine question-1.md .. question-N.md into one DOCX"
    )
    all_parser.add_argument(
        "--source-dir",
        default=None,
        help="Directory with question-N.md files (default: MARKDOC_SOURCE_DIR or cwd)",
    )
    all_parser.add_argument(
        "--output",
        default=None,
        help="Output .docx path (default: MARKDOC_OUTPUT_DIR / MARKDOC_OUTPUT_NAME)",
    )
    all_parser.add_argument("--title", default=None, help="Document title (default: MARKDOC_TITLE)")
    all_parser.add_argument(
        "--template",
        default=None,
        help="Template .docx with an optional {{CONTENT}} paragraph",
    )
    all_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Parse worker threads (default: MARKDOC_MAX_WORKERS or 4)",
    )

    question_parser = subparsers.add_parser(
        "build-question", help="Convert question-N.md into question-N.docx"
    )
    question_parser.add_argument("number", nargs="?", default="3", help="Question number")

    dump_parser = subparsers.add_parser(
        "dump-elements", help="Print the parsed structural elements as JSON"
    )
    dump_parser.add_argument("md_path", help="Markdown file to parse")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv(find_dotenv(usecwd=True), override=False)
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    if args.command == "build-all":
        source_dir = Path(args.source_dir) if args.source_dir else config.get_source_dir()
        if args.output:
            out_path = Path(args.output)
        else:
            out_path = config.get_output_dir() / config.get_output_name()
        template = Path(args.template) if args.template else config.get_template_path()
        workers = args.workers if args.workers is not None else config.get_max_workers()
        build_collection(
            source_dir,
            out_path,
            question_source_names(config.get_question_count()),
            title=args.title or config.get_title(),
            template_path=template,
            max_workers=max(1, workers),
        )
        return 0

    if args.command == "build-question":
        try:
            build_question(
                args.number,
                config.get_source_dir(),
                config.get_output_dir(),
                template_path=config.get_template_path(),
            )
        except MissingInputError as err:
            raise SystemExit(f"ERROR: {err}")
        return 0

    if args.command == "dump-elements":
        md_path = Path(args.md_path)
        try:
            text = require_source_text(md_path)
        except MissingInputError as err:
            raise SystemExit(f"ERROR: {err}")
        payload = ElementList(source=md_path.name, elements=parse_markdown(text))
        print(payload.model_dump_json(indent=2))
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
