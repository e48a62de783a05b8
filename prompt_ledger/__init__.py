"""System prompt version ledger for the invoicing assistant admin tool."""
