"""Page-map model and navigation normalization."""
