from .client import AiohttpFetcher, DEFAULT_USER_AGENT

__all__ = ["AiohttpFetcher", "DEFAULT_USER_AGENT"]
