"""Church discovery scoring and smart reminder engine."""
