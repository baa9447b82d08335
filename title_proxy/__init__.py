"""Title proxy: LLM title/draft endpoints backed by a cached help-site guide."""

__version__ = "0.1.0"
