"""Infrastructure layer of the CBR Gateway."""
