"""Account management and credential authentication service."""
