"""SQLAlchemy plumbing: metadata, column types, engine factory and schema."""
