"""Pydantic Schemas: query-parameter validation at the HTTP boundary."""
