"""In-memory request log and aggregate statistics for the recommender."""
