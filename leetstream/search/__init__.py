"""Query planning, index search and ranking helpers."""
