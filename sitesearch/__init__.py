"""sitesearch: hybrid retrieval and sitemap ingestion for retrieval-augmented chat."""

__version__ = "1.0.0"
