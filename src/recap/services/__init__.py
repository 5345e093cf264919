"""Service layer for recap."""
