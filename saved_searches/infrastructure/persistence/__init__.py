"""SQLModel persistence: tables, mappers and repositories."""
