"""Desktop pygame host."""
