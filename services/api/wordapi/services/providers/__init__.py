"""Category generation providers and the fallback chain that drives them."""

from wordapi.services.providers.base import ContentProvider, HttpContentProvider, ProviderResult
from wordapi.services.providers.chain import ProviderChain, build_provider_chain
from wordapi.services.providers.fallback import FallbackGenerator
from wordapi.services.providers.parsing import extract_first_json_array, parse_categories

__all__ = [
    "ContentProvider",
    "FallbackGenerator",
    "HttpContentProvider",
    "ProviderChain",
    "ProviderResult",
    "build_provider_chain",
    "extract_first_json_array",
    "parse_categories",
]
