"""Application layer – event store, dispatch, audit and cache consumers."""
