"""Pure domain helpers: clock, DTOs, argument validation."""
