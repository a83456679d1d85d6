"""Knowledge-base ingestion: pagination, enrichment, dedup and loading."""

from outline_rag.services.ingestion.ingestion_service import IngestionService

__all__ = ["IngestionService"]
