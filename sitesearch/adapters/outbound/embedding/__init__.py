from .gemini_embedder import GeminiEmbedder

__all__ = ["GeminiEmbedder"]
