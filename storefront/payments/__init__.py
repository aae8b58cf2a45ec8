"""Payment gateway integrations."""
