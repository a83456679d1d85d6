"""Business logic: chunking, ingestion and the RAG workflow."""
