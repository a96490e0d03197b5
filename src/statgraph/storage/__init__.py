"""Statistics file location and cluster topology lookup."""
