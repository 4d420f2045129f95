"""Domain entities, rules and errors."""
