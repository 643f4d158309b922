"""Desktop app namespace."""
