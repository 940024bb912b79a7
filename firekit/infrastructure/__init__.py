"""Infrastructure: Firestore and in-memory document store implementations."""
