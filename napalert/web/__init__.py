"""Status API for NapAlert."""
