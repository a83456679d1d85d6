"""State models for the retrieve-then-generate RAG workflow.

``QueryState`` lives for exactly one workflow invocation.  Nodes never
mutate it: each returns a partial update and the workflow produces the
next state with ``model_copy(update=...)``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from outline_rag.models.rag import StoredChunk


class WorkflowNode(str, Enum):  # noqa: UP042
    """Nodes of the RAG graph, including the virtual entry and exit."""

    START = "__start__"
    RETRIEVE = "retrieve"
    GENERATE = "generate"
    END = "__end__"


class QueryState(BaseModel):
    """Per-request state carried through the RAG graph."""

    model_config = ConfigDict(frozen=True)

    question: str = Field(description="The user's question.")
    context: list[StoredChunk] = Field(
        default_factory=list,
        description="Retrieved chunks in similarity order, most relevant first.",
    )
    answer: str = Field(default="", description="User-facing answer text.")
    raw_answer: str = Field(
        default="", description="Unmodified model output, including any reasoning section."
    )


class WorkflowUpdate(BaseModel):
    """Emitted by ``RAGWorkflow.stream`` each time a node completes."""

    model_config = ConfigDict(frozen=True)

    node: WorkflowNode
    state: QueryState
