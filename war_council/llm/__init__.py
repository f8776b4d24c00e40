"""LLM client for OpenRouter API integration."""

from .openrouter import OpenRouterClient, ModelTier, LLMResponse, ToolCall

__all__ = ["OpenRouterClient", "ModelTier", "LLMResponse", "ToolCall"]
