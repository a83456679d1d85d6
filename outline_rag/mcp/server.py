"""
RAG Agent MCP Server

Two tools over the same workflow.  ``rag_query`` runs it to completion;
``rag_stream_query`` consumes the incremental updates and returns the answer
of the last ``generate`` step.  Both return plain text.  A blank question or
any failure inside the workflow is reported as an error tool result carrying
the message, never as a crash of the server.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog
from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from outline_rag.models.workflow import WorkflowNode
from outline_rag.services.rag.workflow import RAGWorkflow

logger = structlog.get_logger(logger_name=__name__)

SERVER_NAME = "rag-agent-server"
NO_ANSWER = "No answer generated"


# =============================================================================
# Tool Implementations
# =============================================================================

def _require_question(question: str | None) -> str:
    if question is None or not question.strip():
        raise ValueError("Question is required")
    return question.strip()


async def answer_question(workflow: RAGWorkflow, question: str | None) -> str:
    """Run the workflow once and return its answer text."""
    state = await workflow.invoke(_require_question(question))
    return state.answer or NO_ANSWER


async def stream_answer(workflow: RAGWorkflow, question: str | None) -> str:
    """Collect the answer from the last ``generate`` update of a streamed run."""
    answer = ""
    async for update in workflow.stream(_require_question(question)):
        if update.node == WorkflowNode.GENERATE:
            answer = update.state.answer
    return answer or NO_ANSWER


def create_server(workflow: RAGWorkflow, name: str = SERVER_NAME) -> FastMCP:
    """Create the MCP server with the rag_query and rag_stream_query tools."""
    mcp = FastMCP(name)

    @mcp.tool()
    async def rag_query(question: str) -> str:
        """
        Answer a question using the ingested knowledge base.

        Args:
            question: Natural-language question

        Returns:
            The generated answer, or "No answer generated"
        """
        try:
            return await answer_question(workflow, question)
        except Exception as exc:
            logger.error("rag_query_failed", error=str(exc))
            raise ToolError(f"Error: {exc}") from exc

    @mcp.tool()
    async def rag_stream_query(question: str) -> str:
        """
        Answer a question by streaming the workflow and returning the final answer.

        Args:
            question: Natural-language question

        Returns:
            The generated answer, or "No answer generated"
        """
        try:
            return await stream_answer(workflow, question)
        except Exception as exc:
            logger.error("rag_stream_query_failed", error=str(exc))
            raise ToolError(f"Error: {exc}") from exc

    return mcp


async def run_server() -> None:
    """Build the workflow from the environment and serve over stdio."""
    from outline_rag.config.settings import load_settings
    from outline_rag.main import build_rag_workflow
    from outline_rag.utils.logging import configure_logging

    app_settings = load_settings()
    # stdout carries the protocol; logs go to stderr only.
    configure_logging(
        log_level=app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
        stream=sys.stderr,
    )
    mcp = create_server(build_rag_workflow(app_settings))
    logger.info("mcp_server_starting", name=SERVER_NAME)
    await mcp.run_stdio_async()


# =============================================================================
# CLI Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point for the MCP server."""
    from outline_rag.utils.errors import OutlineRAGError

    parser = argparse.ArgumentParser(
        description="RAG Agent MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
    python -m outline_rag.mcp --env-file .env
""",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Environment file with provider keys (default: .env)",
    )
    args = parser.parse_args()

    load_dotenv(args.env_file)

    try:
        asyncio.run(run_server())
    except OutlineRAGError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
