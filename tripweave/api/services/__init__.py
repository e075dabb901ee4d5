"""Service layer built on the domain modules."""
