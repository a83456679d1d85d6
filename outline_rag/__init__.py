"""outline-rag: agentic chunking and retrieval-augmented answering over an Outline knowledge base."""

__version__ = "1.0.0"
