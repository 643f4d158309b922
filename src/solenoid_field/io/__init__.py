"""Settings and catalog I/O."""
