"""Cross-catalog minifigure matching and set inventory materialization."""
