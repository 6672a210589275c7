"""
Offline console demo: runs a full booking conversation without any API keys.

Drives the real workflow engine and session store against the mock
scheduling provider. No network calls. Designed for demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario cancel
"""

import argparse
import asyncio
import uuid
from zoneinfo import ZoneInfo

from clinic_booking.config import settings
from clinic_booking.conversation.session_store import InMemorySessionStore
from clinic_booking.conversation.state_machine import is_terminal
from clinic_booking.conversation.workflow import WorkflowEngine
from clinic_booking.tools.mock_provider import MockSchedulingProvider

BLUE = "\033[94m"
GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """Chats with the booking engine in the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "booking": [
            "Hi",
            "I need a follow-up visit",
            "tomorrow morning",
            "1",
            "Jane Doe",
            "jane@example.com",
            "yes",
        ],
        "cancel": [
            "Hello",
            "physical exam please",
            "tomorrow",
            "2",
            "John Smith",
            "john.smith@example.com",
            "no thanks",
            "hi again",
        ],
        "retry": [
            "Hi",
            "I'd like to see a specialist",
            "whenever",
            "tomorrow afternoon",
            "7",
            "1",
            "Alex Rivera",
            "not an email",
            "alex@example.com",
            "hmm",
            "confirm",
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self) -> None:
        self.session_id = f"console-{uuid.uuid4().hex[:8]}"
        self.store = InMemorySessionStore()
        self.provider = MockSchedulingProvider(
            tz=ZoneInfo(settings.clinic.timezone),
            work_start_hour=settings.clinic.work_start_hour,
            work_end_hour=settings.clinic.work_end_hour,
            location=settings.clinic.location,
        )
        self.engine = WorkflowEngine(provider=self.provider, store=self.store)

    def agent_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Assistant]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  CLINIC BOOKING ASSISTANT - {title}{RESET}")
        print(f"{BOLD}  Clinic: {settings.clinic.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _state(self) -> str:
        session = self.store.get(self.session_id)
        return session.state.value if session else "-"

    def _finished(self) -> bool:
        session = self.store.get(self.session_id)
        return session is not None and is_terminal(session.state)

    def _send(self, text: str) -> None:
        reply = asyncio.run(self.engine.process_message(self.session_id, text))
        self.agent_say(reply)
        self.system_log(f"State: {self._state()}")

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        for step in steps:
            if self._finished():
                break
            print(f"\n{BLUE}[Patient] {RESET}{step}")
            self._send(step)

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Final state: {self._state()}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    def run(self) -> None:
        self._banner("Console Demo")
        print(f"{BOLD}  Type 'quit' to exit. Say hello to begin.{RESET}")

        while not self._finished():
            user_input = input(f"\n{BLUE}[Patient] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return

            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.agent_say("That was quite long. Could you keep it brief for me?")
                continue

            self._send(user_input)

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Conversation complete.{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline clinic booking demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        help="Auto-play a scripted conversation instead of reading stdin",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
