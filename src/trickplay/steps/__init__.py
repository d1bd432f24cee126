"""Pipeline steps, one package per stage."""
