"""Routers package — HTTP endpoint definitions.

Files:
  boq.py   — Relay routes (/api/fetch-product-details, /api/generate-boq, /api/refine-boq)
"""
