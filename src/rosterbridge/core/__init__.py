"""Core types shared by endpoint, listener and gateway."""
