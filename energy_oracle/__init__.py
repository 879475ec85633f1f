"""Energy Oracle: cached aggregation of weather, energy-price, carbon-credit and certification data."""
