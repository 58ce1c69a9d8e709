# Pilosa HTTP Client
# File: internal/__init__.py
# Version: v1

"""Wire-level protobuf messages. Not part of the public API."""

__all__ = ["messages"]
