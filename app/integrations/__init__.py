"""External integration adapters."""

from .azure_speech import AzureSpeechClient
from .cloudinary import CloudinaryClient
from .did import DIDClient
from .gemini import GeminiClient
from .openai import OpenAIClient
from .shopify import ShopifyOAuthClient
from .vertex import VertexImagenClient

__all__ = [
    "AzureSpeechClient",
    "CloudinaryClient",
    "DIDClient",
    "GeminiClient",
    "OpenAIClient",
    "ShopifyOAuthClient",
    "VertexImagenClient",
]
