"""Pure domain logic: clock, value parsing, withdrawal eligibility, DTOs."""
