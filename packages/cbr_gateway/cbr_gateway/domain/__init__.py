"""Domain layer of the CBR Gateway."""
