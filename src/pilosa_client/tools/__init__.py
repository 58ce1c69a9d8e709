# Pilosa HTTP Client
# File: tools/__init__.py
# Version: v1

"""MCP tools exposing the Pilosa client."""

__all__ = ["tasks"]
