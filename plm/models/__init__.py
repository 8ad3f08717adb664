"""Value objects shared by the placement and sync engine."""
