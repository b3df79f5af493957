"""Pydantic schemas for ledger inputs."""
