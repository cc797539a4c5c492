"""Ingestion services: pipeline, dedup, remote fetch, batch orchestration."""
