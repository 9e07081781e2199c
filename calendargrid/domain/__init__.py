"""Grid layout engine: tag parsing, span normalization, lane packing and assembly."""
