"""
Event recommendation engine.

Responsibilities:
- Load a user's attendance history and the event catalog.
- Filter the catalog by venue region and genre.
- Score candidates by genre match and distance to past events.
- Return a ranked list ready for API serialisation.
"""
