"""Data providers - centralized external API access."""

from .base import ProviderClient
from .coingecko import CoinGeckoClient
from .cryptopanic import CryptoPanicClient
from .huggingface import HuggingFaceClient
from .memes import MemeClient


__all__ = [
    "ProviderClient",
    "CoinGeckoClient",
    "CryptoPanicClient",
    "HuggingFaceClient",
    "MemeClient",
]
