"""
Data ingestion package.

Responsibilities:
- Read the raw event and user-history CSV exports.
- Normalize them into the canonical event and history schemas.
- Persist the processed datasets for the recommendation engine.
"""

