from .gemini_keyword_extractor import GeminiKeywordExtractor

__all__ = ["GeminiKeywordExtractor"]
