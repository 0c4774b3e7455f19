"""Eyesoul storefront client-state backend."""
