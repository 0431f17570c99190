"""Notes, commitments, nullifiers, stealth addresses, note encryption and threshold voting."""
