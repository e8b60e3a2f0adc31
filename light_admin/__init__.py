"""Light Admin module: operator CLI for the build light."""
