from .keywords import extract_keywords
from .searcher import SearchConfig, build_params, choose_strategy, fetch_raw_papers, parse_feed
from .transport import DirectTransport, MalformedResponseError, ProxyTransport, TransportChain

__all__ = [
    "DirectTransport",
    "MalformedResponseError",
    "ProxyTransport",
    "SearchConfig",
    "TransportChain",
    "build_params",
    "choose_strategy",
    "extract_keywords",
    "fetch_raw_papers",
    "parse_feed",
]
