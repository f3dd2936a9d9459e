"""Pydantic schemas package.

Folder intent:
  common.py  — CamelModel base + HealthResponse + ErrorResponse (all schemas inherit CamelModel)
  boq.py     — request envelopes for the product lookup and BOQ relay endpoints
"""
