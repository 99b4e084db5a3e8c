"""Pydantic request/response models for the HTTP host."""
