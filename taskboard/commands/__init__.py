"""tb subcommands."""
