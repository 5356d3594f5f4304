"""Service layer for Bloggy."""
