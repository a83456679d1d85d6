"""Retrieve-then-generate RAG workflow as a small declared state graph.

The graph is linear::

    __start__ -> retrieve -> generate -> __end__

Each node is an async function that takes the current frozen
:class:`QueryState` and returns a partial update; the runner merges it with
``model_copy(update=...)`` and follows the single outgoing edge.  There are
no conditional edges and no retry edges.  Retries, if any, belong inside
a node's own provider call.

``retrieve`` asks the vector store for the ``top_k`` most similar stored
propositions.  A store failure propagates; there is no answering without
context.

``generate`` joins the retrieved contents with newlines in retrieval
order, fills the QA prompt and calls the generation model.  Reasoning
models prefix their answer with a ``<think>`` section; only the text after
the first ``</think>`` becomes ``answer``, while ``raw_answer`` keeps the
full output.

:meth:`RAGWorkflow.invoke` returns the final state; :meth:`RAGWorkflow.stream`
yields a :class:`WorkflowUpdate` as each node completes.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import structlog

from outline_rag.interfaces.llm_provider import ILLMProvider
from outline_rag.interfaces.vector_store_provider import IVectorStoreProvider
from outline_rag.models.workflow import QueryState, WorkflowNode, WorkflowUpdate
from outline_rag.services.chunking.extractor import strip_reasoning
from outline_rag.services.rag.prompts import RAG_SYSTEM_PROMPT, render_rag_user_prompt
from outline_rag.utils.errors import WorkflowError

logger = structlog.get_logger(logger_name=__name__)

NodeFn = Callable[[QueryState], Awaitable[dict[str, Any]]]

# Single outgoing edge per node; START and END are virtual.
_EDGES: dict[WorkflowNode, WorkflowNode] = {
    WorkflowNode.START: WorkflowNode.RETRIEVE,
    WorkflowNode.RETRIEVE: WorkflowNode.GENERATE,
    WorkflowNode.GENERATE: WorkflowNode.END,
}


class RAGWorkflow:
    """Answers questions from the stored propositions.

    Parameters
    ----------
    vector_store:
        Store queried by the ``retrieve`` node.
    llm:
        Generation model called by the ``generate`` node.
    top_k:
        Retrieval breadth (number of propositions handed to the model).
    temperature:
        Sampling temperature for the answer.
    """

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        llm: ILLMProvider,
        top_k: int = 4,
        temperature: float = 0.0,
        max_tokens: int = 4000,
    ) -> None:
        self._store = vector_store
        self._llm = llm
        self._top_k = top_k
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._nodes: dict[WorkflowNode, NodeFn] = {
            WorkflowNode.RETRIEVE: self._retrieve,
            WorkflowNode.GENERATE: self._generate,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def invoke(self, question: str) -> QueryState:
        """Run the whole graph and return the terminal state."""
        state: QueryState | None = None
        async for update in self.stream(question):
            state = update.state
        if state is None:
            raise WorkflowError(message="Workflow produced no state")
        return state

    async def stream(self, question: str) -> AsyncIterator[WorkflowUpdate]:
        """Run the graph, yielding the accumulated state after each node."""
        if not question or not question.strip():
            raise WorkflowError(message="Question is required")

        state = QueryState(question=question.strip())
        node = _EDGES[WorkflowNode.START]
        while node is not WorkflowNode.END:
            update = await self._nodes[node](state)
            state = state.model_copy(update=update)
            yield WorkflowUpdate(node=node, state=state)
            node = _EDGES[node]

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    async def _retrieve(self, state: QueryState) -> dict[str, Any]:
        context = await self._store.similarity_search(state.question, k=self._top_k)
        logger.info(
            "retrieve_completed",
            question_length=len(state.question),
            results=len(context),
            top_score=context[0].similarity_score if context else 0.0,
        )
        return {"context": context}

    async def _generate(self, state: QueryState) -> dict[str, Any]:
        context_text = "\n".join(chunk.content for chunk in state.context)
        raw = await self._llm.complete(
            system_prompt=RAG_SYSTEM_PROMPT,
            user_prompt=render_rag_user_prompt(state.question, context_text),
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        answer = strip_reasoning(raw)
        logger.info(
            "generate_completed",
            provider=self._llm.get_provider_name(),
            context_items=len(state.context),
            answer_length=len(answer),
        )
        return {"answer": answer, "raw_answer": raw}
