"""Domain services of the events app."""
