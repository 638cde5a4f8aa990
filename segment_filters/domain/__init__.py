"""Domain types: enums, nodes, result values and the attribute catalog."""
