"""Backend services for the Eyesoul storefront."""
