"""Gemini request building and transport."""
