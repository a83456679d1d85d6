"""Question-answering prompt for the ``generate`` step.

Standard concise-RAG wording: answer from the retrieved context, admit
ignorance, three sentences maximum.
"""

RAG_SYSTEM_PROMPT = (
    "You are an assistant for question-answering tasks. "
    "Use the following pieces of retrieved context to answer the question. "
    "If you don't know the answer, just say that you don't know. "
    "Use three sentences maximum and keep the answer concise."
)

RAG_USER_TEMPLATE = "Question: {question}\nContext: {context}\nAnswer:"


def render_rag_user_prompt(question: str, context: str) -> str:
    return RAG_USER_TEMPLATE.format(question=question, context=context)
