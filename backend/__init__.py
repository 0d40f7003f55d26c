"""Kokoro mood diary backend."""
