"""Activity sources that feed the engine with already-exported rows."""
