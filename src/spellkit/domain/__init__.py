"""Domain layer: identity linkage and spell construction."""
