"""Price sources and the fallback service that chains them."""
