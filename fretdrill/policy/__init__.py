"""Round policies: scheduling, answer options and streak rewards."""
