# site_mirror/crawler/__init__.py
"""site_mirror.crawler: concurrent same-host crawl core (normalizer, visited set, frontier, fetcher, coordinator)."""
