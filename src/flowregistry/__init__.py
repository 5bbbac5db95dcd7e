"""Registry of logical flows between architectural entities."""
