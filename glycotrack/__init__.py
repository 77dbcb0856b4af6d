"""GlycoTrack: glucose and insulin tracking API."""
