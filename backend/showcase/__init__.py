"""Validator showcase: primitive and composite schemas, checked on demand."""
