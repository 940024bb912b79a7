"""Application layer: ports and DTOs shared by store implementations."""
