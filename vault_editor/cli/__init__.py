"""Command line interface for Vault Editor."""
