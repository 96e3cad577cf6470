"""Live baseball scorebook: lineups, at-bat ledger and derived game state."""
