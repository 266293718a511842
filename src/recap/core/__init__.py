"""Shared configuration, errors and terminal output for recap."""
