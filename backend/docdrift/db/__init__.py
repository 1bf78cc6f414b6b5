"""Database seeding."""
