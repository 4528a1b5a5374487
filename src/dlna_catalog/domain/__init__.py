"""Domain layer: catalog synchronization and media inspection."""
