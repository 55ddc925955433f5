"""Input parsers. Each takes a decoded JSON payload and returns a clean dict
keyed by model attribute, or raises ValidationError with per-field details."""
