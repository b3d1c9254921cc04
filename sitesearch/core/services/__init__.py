"""Application services: ingestion, retrieval, fusion and search."""
