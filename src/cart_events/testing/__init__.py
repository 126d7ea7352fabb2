"""Testing – in-memory doubles for pipeline ports."""
