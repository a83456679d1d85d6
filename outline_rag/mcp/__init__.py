"""
RAG Agent MCP Server

Exposes the retrieval-augmented question answering workflow over MCP (stdio).

Tools:
    - rag_query: Answer a question from the ingested knowledge base
    - rag_stream_query: Same answer, collected from the incremental workflow run

Usage:
    # Run the MCP server
    python -m outline_rag.mcp

    # Or in an MCP client config:
    {
        "mcpServers": {
            "rag-agent-server": {
                "command": "python",
                "args": ["-m", "outline_rag.mcp"]
            }
        }
    }
"""

from outline_rag.mcp.server import create_server, run_server

__all__ = ["create_server", "run_server"]
