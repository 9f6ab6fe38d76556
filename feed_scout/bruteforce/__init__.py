# File: feed_scout/bruteforce/__init__.py
"""feed_scout.bruteforce: blind search – перебор типичных адресов фидов."""

from .brute_force import FEED_ENDPOINTS, EndpointGuesser, generate_endpoint_urls, path_ladder

__all__ = ["EndpointGuesser", "FEED_ENDPOINTS", "generate_endpoint_urls", "path_ladder"]
