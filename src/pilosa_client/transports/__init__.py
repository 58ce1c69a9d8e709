# Pilosa HTTP Client
# File: transports/__init__.py
# Version: v1

"""MCP transports for the Pilosa tool server."""
