"""IntentJournal 1inch proxy backend."""
