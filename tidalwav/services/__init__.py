"""Storage services: submission records, uploaded assets, and archives."""
