"""Source handler implementations, one module per source site."""
