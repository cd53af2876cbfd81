"""Optional metrics sinks. Each one is a no-op when its client library is missing."""
