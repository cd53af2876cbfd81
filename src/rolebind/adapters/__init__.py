"""Framework adapters. Import the specific module; each guards its own optional dependency."""
