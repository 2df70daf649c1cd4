"""Adapters binding the core ports to Bitcoin address rules and the Insight API."""
