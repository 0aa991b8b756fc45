"""Crawl engine: request models, shared state, transport and the controller."""
