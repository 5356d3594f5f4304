"""HTTP API for Bloggy."""
