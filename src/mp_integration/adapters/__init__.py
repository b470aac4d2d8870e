"""Adapters – integrations with external transports."""
