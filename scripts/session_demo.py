#!/usr/bin/env python
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from ragclient.application import SessionService
from ragclient.core.settings import ClientSettings


async def run(args: argparse.Namespace) -> None:
    settings = ClientSettings.from_env()
    if args.api_base:
        settings.api_base = args.api_base.rstrip("/")
    service = SessionService(settings)
    try:
        await service.startup()
        print(f"backend {settings.api_base}: {service.store.availability.value}")

        if args.urls:
            await service.ingestion.ingest("\n".join(args.urls))
        if args.extract:
            await service.extraction.extract(args.extract, args.query)
        if args.question:
            await service.chat.send(args.question)

        for message in service.store.transcript:
            tag = message.agent.display_name if message.agent else message.role.value
            print(f"[{tag}] {message.content}")

        if args.export:
            saved = service.exporter.export_current(args.export)
            if saved is None:
                print("no extracted data to export")
            else:
                print(f"exported {saved.filename} -> {saved.location}")
    finally:
        await service.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Drive one RAG client session from the command line")
    parser.add_argument("--api-base", help="backend base URL (defaults to RAG_API_BASE)")
    parser.add_argument("--url", dest="urls", action="append", default=[], help="URL to ingest (repeatable)")
    parser.add_argument("--question", help="chat message to send")
    parser.add_argument("--extract", help="run a direct extraction of this type (e.g. contacts)")
    parser.add_argument("--query", default="all", help="extraction target URL or 'all'")
    parser.add_argument("--export", help="write the extracted dataset to this CSV file name")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
