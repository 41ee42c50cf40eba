"""Lifecycle management for Pinecone indexes and collections."""

__version__ = "0.1.0"
