#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Entry Point
Serve the HTTP API or chat with the companion from a terminal

Version: 1.0.0
Date: 2026-10-19
"""

import argparse
import asyncio
import sys
import logging

from sahaayak.config import config
from sahaayak.core.catalog import VERIFIED_HELPLINES
from sahaayak.core.models import User, ValidationError
from sahaayak.core.database import create_record_store
from sahaayak.core.oracle import create_oracle
from sahaayak.core.session import AppSession, CompanionSettings
from sahaayak.utils.logger import configure_logging

logger = logging.getLogger(__name__)

CRISIS_MESSAGE = (
    "It sounds like you're going through a lot right now. You don't have to face it alone.\n"
    "Please reach out to someone you trust, or call one of these helplines:"
)

def _render(result) -> str:
    if result.is_crisis:
        helplines = "\n".join(f"  ☎️ {h.number}" for h in VERIFIED_HELPLINES)
        return f"{CRISIS_MESSAGE}\n{helplines}"

    lines = []
    if result.affirmation:
        lines.append(f"✨ {result.text}")
    elif result.text:
        lines.append(result.text)
    if result.playlist:
        lines.append(f"🎵 {result.playlist.title}: {result.playlist.url}")
    if result.quick_replies:
        lines.append("   " + " | ".join(f"[{reply}]" for reply in result.quick_replies))
    return "\n".join(lines)

async def chat_loop(user_id: str) -> None:
    """Terminal conversation against the configured store and oracle"""
    store = create_record_store(config.database)
    await store.start()

    session = AppSession(
        store,
        oracle=create_oracle(config.ai),
        settings=CompanionSettings(
            selected_persona=config.behaviour.default_persona,
            dynamic_persona_enabled=config.behaviour.dynamic_persona_default
        ),
        tz_name=config.behaviour.timezone
    )
    session.login(User(uid=user_id, name=user_id))
    print("Sahaayak is listening. Type /quit to leave.")

    try:
        while True:
            try:
                text = await asyncio.to_thread(input, "you> ")
            except EOFError:
                break
            if text.strip() in ("/quit", "/exit"):
                break
            try:
                result = await session.submit_message(text)
            except ValidationError as e:
                print(f"! {e}")
                continue
            print(f"sahaayak ({result.persona_used.value})> {_render(result)}")
    finally:
        await store.shutdown()

def main() -> int:
    parser = argparse.ArgumentParser(description="Sahaayak wellness companion engine")
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=config.server.host, help="Bind address")
    serve.add_argument("--port", type=int, default=config.server.port, help="Port")

    chat = subparsers.add_parser("chat", help="Chat from the terminal")
    chat.add_argument("--user", default="local-user", help="User id for stored history")

    args = parser.parse_args()
    configure_logging(config)
    config.ensure_directories()

    try:
        if args.command == "chat":
            asyncio.run(chat_loop(args.user))
        else:
            from sahaayak.api.app import run_server
            run_server(getattr(args, "host", None), getattr(args, "port", None), config)
    except KeyboardInterrupt:
        logger.info("👋 Stopped by user")
    except Exception as e:
        logger.error(f"💥 Fatal error: {e}")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
