"""Feature packages for neo-tenancy."""
