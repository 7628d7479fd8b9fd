"""Season processing, all-time aggregation and output models."""
