"""Board representation, hashing and logging setup."""
