"""Shared library: config, logging, middleware, embedder, HTTP helpers."""
