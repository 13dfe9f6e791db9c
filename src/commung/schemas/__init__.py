"""Request and response models for the console, app and bot APIs."""
