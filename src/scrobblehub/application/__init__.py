"""Application layer: config resolution and source lifecycle."""
