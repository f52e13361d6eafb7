"""Interactive CLI chat simulator — drive the bot without a WhatsApp account."""

import asyncio

from anm_bot.config import settings
from anm_bot.services.broadcast import BroadcastHub
from anm_bot.services.connection_manager import ConnectionManager
from anm_bot.services.timers import TimerRegistry
from anm_bot.transport.base import DisconnectReason
from anm_bot.transport.local import LocalTransport, OutboundMessage

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
CYAN = "\033[96m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"


class ConsoleObserver:
    """Prints lifecycle events the way an operator dashboard would receive them."""

    is_open = True

    async def send_json(self, data: dict) -> None:
        print(f"{CYAN}[event]{RESET} {data}")


async def main() -> None:
    print(f"\n{BOLD}{'=' * 52}")
    print(f"  🤖  {settings.app_name} — Chat Simulator")
    print(f"{'=' * 52}{RESET}\n")

    print(f"{DIM}Commands: 'quit' exit, 'switch' change phone number,{RESET}")
    print(f"{DIM}          '/drop' lose the connection, '/logout' log the account out,{RESET}")
    print(f"{DIM}          '/reset' reset the client{RESET}\n")

    phone = (await asyncio.to_thread(input, f"{YELLOW}Enter phone number to simulate: {RESET}")).strip()
    if not phone:
        phone = "5215512345678"
    print(f"{DIM}Simulating as {phone}{RESET}\n")

    # ── Set up the framework ─────────────────────────────
    clients: list[LocalTransport] = []

    def on_send(message: OutboundMessage) -> None:
        print(f"{GREEN}{BOLD}Bot → {message.to}:{RESET} {message.text}\n")

    def build_client() -> LocalTransport:
        client = LocalTransport(on_send=on_send)
        clients.append(client)
        return client

    manager = ConnectionManager(
        transport_factory=build_client,
        timers=TimerRegistry(settings.warning_delay_seconds, settings.reset_delay_seconds),
    )
    hub = BroadcastHub(manager)
    await manager.open()
    await hub.attach(ConsoleObserver())

    async def pair_latest() -> None:
        await manager.drain()
        clients[-1].pair()
        await manager.drain()

    await manager.start()
    await pair_latest()

    while True:
        try:
            user_input = (await asyncio.to_thread(input, f"{BLUE}{BOLD}You:{RESET} ")).strip()
        except (KeyboardInterrupt, EOFError):
            print(f"\n{DIM}Goodbye!{RESET}")
            break

        if not user_input:
            continue

        if user_input.lower() == "quit":
            print(f"{DIM}Goodbye!{RESET}")
            break

        if user_input.lower() == "switch":
            phone = (await asyncio.to_thread(input, f"{YELLOW}New phone number: {RESET}")).strip()
            print(f"{DIM}Switched to {phone}{RESET}\n")
            continue

        if user_input == "/drop":
            clients[-1].drop(DisconnectReason.CONNECTION_LOST)
            await pair_latest()
            continue

        if user_input == "/logout":
            clients[-1].drop(DisconnectReason.LOGGED_OUT)
            await manager.drain()
            print(f"{DIM}Account logged out; use '/reset' to link it again{RESET}\n")
            continue

        if user_input == "/reset":
            await manager.reset()
            await pair_latest()
            continue

        # ── Route the message through the framework ──────
        clients[-1].receive(phone, user_input)
        await manager.drain()

    await manager.close()


if __name__ == "__main__":
    asyncio.run(main())
