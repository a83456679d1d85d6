"""Concrete adapters for the interfaces in ``outline_rag.interfaces``."""
