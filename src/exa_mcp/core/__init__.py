"""Core capability catalog, remote client, and research task lifecycle."""
