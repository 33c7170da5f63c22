"""Core infrastructure: paths, configuration, theming and path-set reduction."""
