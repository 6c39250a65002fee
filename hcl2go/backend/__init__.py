"""Go code emission."""
