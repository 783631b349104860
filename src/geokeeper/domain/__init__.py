"""Domain layer: model, rules and ports for cache edits and log publication."""
