"""Deal pipeline service: stage registry, board projection and pipeline metrics."""
