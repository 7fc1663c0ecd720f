"""
Terminal chat client

Drives one interview or knowledge-base chat session from the terminal,
printing the agent's reply as it streams.

Usage:
    python scripts/chat_cli.py "<user_id>+<email>"          # interview session
    python scripts/chat_cli.py <user_id> --agent-chat      # new knowledge-base chat
    python scripts/chat_cli.py "<user_id>+<email>" --agent-id=<id>

Commands inside the session:
    /complete   complete the interview (after enough exchanges)
    /quit       leave
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger

from interview_chat.config.settings import settings
from interview_chat.services.backend import BackendClient
from interview_chat.services.completion import RelayCompletionClient
from interview_chat.session import (
    Role,
    SendOrchestrator,
    SessionContext,
    SessionKey,
    SessionLifecycleController,
    SessionMode,
    parse_route_param,
)
from interview_chat.utils.errors import ChatSessionError, ConfigurationError
from interview_chat.utils.logger import setup_logger


class StreamPrinter:
    """Transcript observer that prints only what is new in the last assistant message."""

    def __init__(self):
        self._message_id = None
        self._printed = 0

    def __call__(self, transcript):
        if not transcript or transcript[-1].role != Role.ASSISTANT:
            return
        message = transcript[-1]
        if message.id != self._message_id:
            self._message_id = message.id
            self._printed = 0
        if len(message.content) < self._printed:
            # Content was replaced (error text), start the line over
            print()
            self._printed = 0
        print(message.content[self._printed:], end="", flush=True)
        self._printed = len(message.content)


def _option(name):
    for arg in sys.argv[2:]:
        if arg.startswith(f"--{name}="):
            return arg.split("=", 1)[1]
    return None


async def run(target: str, mode: SessionMode, agent_id=None):
    async with BackendClient() as backend:
        if mode == SessionMode.AGENT_CHAT:
            session_key = SessionKey.new_chat(target, settings.session_key_delimiter)
        else:
            session_key, route_agent_id = parse_route_param(target, settings.session_key_delimiter)
            agent_id = agent_id or route_agent_id

        account = await backend.get_account(session_key.account_id)
        context = SessionContext.resolve(session_key, account, mode=mode, agent_id=agent_id)
        if not context.ready:
            print(f"No {mode.value} agent is configured for account {session_key.account_id}.")
            print("Create the agent from the dashboard settings, then come back.")
            return

        completion = RelayCompletionClient()
        lifecycle = SessionLifecycleController(context, backend=backend, completion=completion)
        await lifecycle.load()
        for message in lifecycle.transcript:
            print(f"[{message.role.value}] {message.content}")

        lifecycle.add_observer(StreamPrinter())
        orchestrator = SendOrchestrator(lifecycle, backend)

        try:
            if mode == SessionMode.INTERVIEW and lifecycle.is_finished:
                print(f"This interview is already {lifecycle.status.value}. Thank you!")
                return

            while True:
                line = await asyncio.to_thread(input, "\n> ")
                command = line.strip()
                if command == "/quit":
                    break
                if command == "/complete":
                    try:
                        await lifecycle.complete()
                        print("Interview completed. Thank you!")
                        break
                    except ChatSessionError as e:
                        print(f"Cannot complete interview: {e}")
                    continue

                outcome = await orchestrator.send(line)
                print()
                if not outcome.ok:
                    print(f"! {outcome.notice}")
                elif lifecycle.completion_eligible and not lifecycle.is_finished and mode == SessionMode.INTERVIEW:
                    print("(You can now type /complete to finish the interview)")
        finally:
            await completion.aclose()


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    setup_logger(level="WARNING")
    mode = SessionMode.AGENT_CHAT if "--agent-chat" in sys.argv else SessionMode.INTERVIEW

    try:
        asyncio.run(run(sys.argv[1], mode, agent_id=_option("agent-id")))
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        pass


if __name__ == "__main__":
    main()
