"""HTTP API, persistence and background jobs for the story service."""
