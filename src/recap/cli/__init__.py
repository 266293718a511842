"""Command line interface for browsing and flushing stored captures."""
