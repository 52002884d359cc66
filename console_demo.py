"""
Offline console demo: drives the query tools against in-memory sample data.

Uses the real dispatcher, assistant state machine, parsers and filter
builder with the in-memory connector. No credentials, no network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario assistant
    python console_demo.py --scenario shorthand

Interactive input is sent to the query assistant. Prefix a line with
``/d365`` for a shorthand command or ``/query`` for a natural-language
query.
"""

import argparse

from dynamics_assistant.config import settings
from dynamics_assistant.connector.in_memory import InMemoryConnector
from dynamics_assistant.services import build_services
from dynamics_assistant.tools import definitions
from dynamics_assistant.tools.dispatcher import ToolDispatcher

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """Interactive or scripted walkthrough of the query tools."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "assistant": [
            "contas",
            "1",
            "cidade = Sao Paulo",
            "nome, cidade",
            "nome asc",
            "10",
            "sim",
        ],
        "count": [
            "casos",
            "contar",
            "sem filtro",
            "todos",
            "sim",
        ],
        "shorthand": [
            "/d365 account:list name=*Contoso* top=5",
            "/d365 account:get acc-002",
            "/d365 account:count",
            "/d365 incident:fields",
            "/d365 get metadata contact",
        ],
        "nl": [
            "/query listar contas top 2",
            "/query buscar contatos sobrenome igual Smith",
            "/query quantos casos",
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self) -> None:
        self.services = build_services(connector=InMemoryConnector(), auto_sweep=False)
        self.dispatcher = ToolDispatcher(self.services)
        self.session_id = ""

    def assistant_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Assistente]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _start_session(self) -> None:
        contents = self.dispatcher.call_tool(definitions.ASSISTANT_START, {})
        self.assistant_say(contents[0].text)
        # second block is "sessionId: <id>"
        self.session_id = contents[1].text.split(": ", 1)[1]
        self.system_log(f"Session: {self.session_id}")

    def _call(self, name: str, arguments: dict) -> None:
        for content in self.dispatcher.call_tool(name, arguments):
            self.assistant_say(content.text)

    def _process_input(self, text: str) -> None:
        if text.startswith("/d365 "):
            self._call(definitions.D365_SHORTHAND, {"command": text[len("/d365 "):]})
            return
        if text.startswith("/query "):
            self._call(definitions.DYNAMICS_QUERY, {"query": text[len("/query "):]})
            return

        self._call(definitions.ASSISTANT_INPUT, {"sessionId": self.session_id, "input": text})
        step = self.services.assistant.current_step(self.session_id)
        if step is not None:
            self.system_log(f"Step: {step.value}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  DYNAMICS ASSISTANT - {title}{RESET}")
        print(f"{BOLD}  Server: {settings.server_name} (in-memory data){RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        self._start_session()
        for step in steps:
            print(f"\n{BLUE}[Usuário] {RESET}{step}")
            self._process_input(step)

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        session = self.services.assistant.get_session(self.session_id)
        if session is not None:
            print(f"{DIM}  Session completed: {session.completed}{RESET}")
        print(f"{DIM}  Connector calls: {len(self.services.connector.calls)}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        self.services.dispose()

    def run(self) -> None:
        self._banner("Console Demo")
        print(f"{YELLOW}  /d365 <comando>  comando abreviado{RESET}")
        print(f"{YELLOW}  /query <texto>   consulta em linguagem natural{RESET}")
        print(f"{YELLOW}  /novo            nova sessão do assistente{RESET}")
        print(f"{YELLOW}  quit             sair{RESET}")
        print()
        self._start_session()

        try:
            while True:
                user_input = input(f"\n{BLUE}[Usuário] {RESET}").strip()
                if not user_input:
                    continue
                if user_input.lower() in ("quit", "exit", "q", "sair"):
                    print(f"\n{DIM}Session ended.{RESET}")
                    return
                if len(user_input) > self.MAX_INPUT_LENGTH:
                    self.assistant_say("Entrada muito longa. Por favor, seja mais breve.")
                    continue
                if user_input == "/novo":
                    self._call(definitions.ASSISTANT_END, {"sessionId": self.session_id})
                    self._start_session()
                    continue
                self._process_input(user_input)
        finally:
            self.services.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
