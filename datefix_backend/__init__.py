"""DateCreated Fixer backend."""
