"""Shared building blocks: constants, exceptions and HTTP plumbing."""
