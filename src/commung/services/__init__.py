"""Business logic services for the Commung application."""
