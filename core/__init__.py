"""Core services for parsing and importing mystery character guides."""
