# main.py
import argparse
import asyncio
import json
import sys
from pathlib import Path

import structlog

from core.character_import_service import CharacterImportService
from core.http_client_service import HTTPClientService, SupabaseRestClient
from core.logging_config import setup_mystery_logging
from core.parsers.character_guide_parser import extract_character_info, split_character_guides

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mystery-characters",
        description="Parse generated murder-mystery character guides and import them into a package.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Print the records extracted from a guide document as JSON")
    parse_cmd.add_argument("file", type=Path, help="Text file with one or more character guides")
    parse_cmd.add_argument("--aliases", action="store_true", help="Accept older section headings as fallbacks")

    import_cmd = subparsers.add_parser("import", help="Import the guides in a document into a mystery package")
    import_cmd.add_argument("package_id", help="Identifier of the mystery package")
    import_cmd.add_argument("file", type=Path, help="Text file with one or more character guides")
    import_cmd.add_argument("--replace", action="store_true", help="Replace characters the package already has")

    return parser


def parse_document(text: str, use_aliases: bool = False) -> list[dict]:
    """Return the JSON-ready records for every guide in `text`.

    A document without any guide header is treated as a single guide.
    """
    guides = split_character_guides(text) or [text]
    return [extract_character_info(guide, use_aliases=use_aliases).model_dump(exclude_none=True) for guide in guides]


async def run_import(package_id: str, text: str, replace_existing: bool) -> bool:
    async with HTTPClientService() as http_client:
        service = CharacterImportService(SupabaseRestClient(http_client))
        success, message = await service.import_character_batch(package_id, text, replace_existing=replace_existing)
    if success:
        logger.info(message, package_id=package_id)
    else:
        logger.error(message, package_id=package_id)
    return success


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_mystery_logging()

    try:
        text = args.file.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Could not read {args.file}: {e}")
        return 2

    if args.command == "parse":
        print(json.dumps(parse_document(text, use_aliases=args.aliases), indent=2, ensure_ascii=False))
        return 0

    try:
        return 0 if asyncio.run(run_import(args.package_id, text, args.replace)) else 1
    except KeyboardInterrupt:
        logger.info("Import interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
