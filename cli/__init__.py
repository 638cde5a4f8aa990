"""Developer command wrappers exposed as project scripts."""
