"""Command line interface for schema provisioning."""
