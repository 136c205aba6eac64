"""Video ingestion service: transcoding, artifact storage and metadata sync."""
