"""Grade, GPA and ledger computation for NEB school results."""
