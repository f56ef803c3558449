"""Elder-care staff messaging and alerts backend."""
