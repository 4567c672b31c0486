"""Pure domain layer: values, entities, clock and policies. Zero I/O."""
