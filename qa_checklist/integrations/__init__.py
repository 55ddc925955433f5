"""Outbound HTTP gateways (object storage, identity provider)."""
