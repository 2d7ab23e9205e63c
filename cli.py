# Role: Local developer CLI to interact with FlowController without the web UI.
# Useful for deterministic testing and seeing debug logs in the terminal.

from __future__ import annotations

import asyncio
import json

import alumni_bot.config
alumni_bot.config.load_env()

from alumni_bot.core.flow_controller import FlowController
from alumni_bot.services.user_store import InMemoryUserStore
from alumni_bot.utils.demo_data import DEMO_PHONE, seed_demo_users
from alumni_bot.utils.logger import configure


async def run() -> None:
    # 1) Create FlowController over a demo-seeded store
    # 2) Keep one phone identity across turns
    # 3) Route user input -> FlowController -> print bot output
    print("JY Alumni Bot CLI")
    print("Commands: /new (reset session), /phone <number>, /state (show session), /exit")
    print("-" * 50)

    store = InMemoryUserStore()
    seed_demo_users(store)
    flow = FlowController(store=store)
    phone = DEMO_PHONE
    print(f"phone: {phone}")

    while True:
        try:
            user_message = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_message:
            continue

        cmd = user_message.lower()

        if cmd in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        if cmd in {"/new", "new"}:
            flow.state_manager.reset(phone)
            print(f"Session reset for {phone}")
            continue

        if cmd.startswith("/phone"):
            parts = user_message.split(maxsplit=1)
            if len(parts) == 2:
                phone = parts[1].strip()
            print(f"phone: {phone}")
            continue

        if cmd in {"/state", "state"}:
            session = flow.state_manager.get_or_create(phone)
            print(json.dumps(session.to_flat(), indent=2))
            continue

        result = await flow.handle_turn(phone, user_message)
        print(f"\nBot: {result.reply}")


def main() -> None:
    configure(alumni_bot.config.LOG_LEVEL)
    asyncio.run(run())


if __name__ == "__main__":
    main()
