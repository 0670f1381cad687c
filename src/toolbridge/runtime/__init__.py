"""Runtime layer: concurrency primitives and observability."""
