"""Data models for recap."""
