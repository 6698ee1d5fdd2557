"""Build orchestration core: resolution, host policy, build spec, engine."""
