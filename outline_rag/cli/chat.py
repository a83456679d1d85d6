"""Interactive terminal chat over the RAG workflow.

Lines typed by the user are questions, except for slash commands:

    /context  -- toggle printing of the retrieved context after each answer
    /help     -- show the command list again
    /exit     -- quit

A failing question prints the error and the loop continues.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable
from typing import TextIO

import structlog

from outline_rag.services.rag.workflow import RAGWorkflow

logger = structlog.get_logger(logger_name=__name__)

_RULE = "-" * 43

HELP_TEXT = """\
Type your questions or use the following commands:
  /context - Toggle context visibility
  /exit    - Quit the application
  /help    - Show this help message
"""


class ChatShell:
    """Read-eval-print loop around :meth:`RAGWorkflow.invoke`.

    Parameters
    ----------
    workflow:
        The workflow answering each question.
    input_fn:
        Prompt-and-read function; ``input`` by default.  It runs in a worker
        thread so the event loop is never blocked on the terminal.
    out:
        Stream for all shell output.
    """

    def __init__(
        self,
        workflow: RAGWorkflow,
        input_fn: Callable[[str], str] = input,
        out: TextIO | None = None,
    ) -> None:
        self._workflow = workflow
        self._input = input_fn
        self._out = out if out is not None else sys.stdout
        self.show_context = False

    async def run(self) -> int:
        self._print("AI Assistant Terminal")
        self._print("Welcome to the interactive chat interface!")
        self._print(HELP_TEXT)
        self._print(_RULE)

        while True:
            try:
                line = await asyncio.to_thread(self._input, "You: ")
            except (EOFError, KeyboardInterrupt):
                self._print("\nGoodbye!")
                return 0

            if not await self.handle_input(line.strip()):
                return 0

    async def handle_input(self, line: str) -> bool:
        """Process one line; return ``False`` when the shell should exit."""
        if not line:
            return True
        if line.startswith("/"):
            return self.handle_command(line)

        try:
            state = await self._workflow.invoke(line)
        except Exception as exc:
            logger.warning("chat_question_failed", error=str(exc), error_type=type(exc).__name__)
            self._print(f"Error: {exc}\n")
            return True

        self._print(f"Assistant: {state.answer}\n")
        if self.show_context:
            self._print("Context:")
            for chunk in state.context:
                title = chunk.proposition.source_document_title
                self._print(f"  - [{title}] {chunk.content} ({chunk.similarity_score:.2f})")
            self._print("")
        self._print(_RULE)
        return True

    def handle_command(self, command: str) -> bool:
        command = command.lower()
        if command == "/exit":
            self._print("Goodbye! Have a great day.")
            return False
        if command == "/context":
            self.show_context = not self.show_context
            status = "ON" if self.show_context else "OFF"
            self._print(f"Context visibility is now {status}\n")
        elif command == "/help":
            self._print(HELP_TEXT)
        else:
            self._print("Unknown command. Available commands: /context, /exit, /help\n")
        return True

    def _print(self, text: str) -> None:
        print(text, file=self._out)
