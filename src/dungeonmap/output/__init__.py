"""Output layer — render ServiceResult for terminals (rich) or machines (--json)."""
